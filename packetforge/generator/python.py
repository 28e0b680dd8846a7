"""Python code generator for packetforge protocols."""

import logging
from importlib import resources
from pathlib import Path

from jinja2 import Environment, PackageLoader

from .codec import PARENT_MODULE_ALIAS, build_codec
from .config import GeneratorConfig
from .layout import Declaration, Planner, RecordLayout
from .registry import RegistryEntry, RegistryPlan, build_registry
from .schema import ValidationError, validate
from .types import ProtocolSchema
from .util import module_to_path

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "buffer.py",
    "flags.py",
    "framing.py",
    "runtime.py",
    "serialization.py",
]

PACKAGE_INIT = '"""Generated by packetforge. Do not edit."""\n'

env = Environment(
    loader=PackageLoader("packetforge.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

record_template = env.get_template("record.py.j2")
index_template = env.get_template("index.py.j2")
registry_template = env.get_template("registry.py.j2")


def _declaration(decl: Declaration) -> str:
    """Render a dataclass field declaration."""
    if decl.default_factory is not None:
        return f"{decl.name}: {decl.annotation} = field(default_factory={decl.default_factory})"
    return f"{decl.name}: {decl.annotation} = {decl.default}"


def render_record(layout: RecordLayout, config: GeneratorConfig | None = None) -> str:
    """Render the module of one message or custom type."""
    config = config if config else GeneratorConfig()
    return record_template.render(
        layout=layout,
        codec=build_codec(layout),
        declaration=_declaration,
        parent_alias=PARENT_MODULE_ALIAS,
        runtime_import=config.runtime_import,
        BLANK_LINE="",
    )


def render_index(kind: str, entries: tuple[RegistryEntry, ...]) -> str:
    """Render a flat re-export module."""
    return index_template.render(kind=kind, entries=entries)


def render_registry(plan: RegistryPlan, config: GeneratorConfig | None = None) -> str:
    """Render the id -> class dispatch tables."""
    config = config if config else GeneratorConfig()
    return registry_template.render(
        plan=plan,
        package=config.package,
        runtime_import=config.runtime_import,
    )


def _add_package_inits(artifacts: dict[str, str]) -> None:
    for path in list(artifacts):
        parent = Path(path).parent
        while parent != Path("."):
            artifacts.setdefault((parent / "__init__.py").as_posix(), PACKAGE_INIT)
            parent = parent.parent


def generate(schema: ProtocolSchema, config: GeneratorConfig | None = None) -> dict[str, str]:
    """Generate every module of a protocol.

    Returns a dict of relative file path -> source. The schema is fully
    validated first, so an invalid schema produces no artifacts at all.
    """
    config = config if config else GeneratorConfig()
    validate(schema)

    planner = Planner(schema, config)
    registry = build_registry(planner)

    artifacts: dict[str, str] = {}
    for record in [*schema.types, *schema.messages]:
        layout = planner.plan(record)
        path = module_to_path(layout.module)
        if path in artifacts:
            raise ValidationError(f"{record.name} maps to {path}, which is already generated")
        artifacts[path] = render_record(layout, config)

    root = config.package.replace(".", "/")
    artifacts[f"{root}/message_index.py"] = render_index("messages", registry.messages)
    artifacts[f"{root}/type_index.py"] = render_index("types", registry.types)
    artifacts[f"{root}/registry.py"] = render_registry(registry, config)
    _add_package_inits(artifacts)

    logger.info(
        "Generated %d modules for %d messages and %d types",
        len(artifacts),
        len(schema.messages),
        len(schema.types),
    )
    return artifacts


def write(artifacts: dict[str, str], output_dir: str | Path) -> list[Path]:
    """Write generated artifacts below output_dir, returning the written paths."""
    written: list[Path] = []
    for rel_path, content in artifacts.items():
        path = Path(output_dir) / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
        written.append(path)
    return written


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("packetforge.proto").joinpath(filename).read_text()
        result[filename] = content
    return result
