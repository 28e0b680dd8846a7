"""Naming helpers shared by the generator."""

import keyword
import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

# Members of generated classes and names their bodies evaluate
GENERATED_MEMBERS = frozenset(
    {
        "deserialize",
        "field",
        "get_message_id",
        "get_type_id",
        "list",
        "pack",
        "reset",
        "serialize",
        "unpack",
    }
)


def to_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case.

    Runs of capitals are kept together: ``writeUTF`` -> ``write_utf``,
    ``HTTPServerMessage`` -> ``http_server_message``.
    """
    return _WORD_BOUNDARY.sub("_", name).lower()


def to_identifier(name: str) -> str:
    """Convert a schema name to a Python identifier."""
    ident = to_snake_case(name)
    if keyword.iskeyword(ident):
        ident += "_"
    return ident


def to_field_name(name: str) -> str:
    """Convert a schema field name to an attribute name of a generated class.

    Names of generated members, and the builtins the class body refers to,
    get a trailing underscore like keywords do.
    """
    ident = to_identifier(name)
    if ident in GENERATED_MEMBERS:
        ident += "_"
    return ident


def namespace_to_module(package: str, name: str, root: str, prefix: str = "") -> str:
    """Map a schema namespace and record name to a dotted module path.

    ``prefix`` is stripped from the namespace before it is placed under
    ``root``, e.g. ``com.example.network.messages`` with prefix ``com.example``
    and root ``protocol`` becomes ``protocol.network.messages.<name>``.
    """
    if prefix and (package == prefix or package.startswith(prefix + ".")):
        package = package[len(prefix) :].lstrip(".")

    parts = [root]
    parts.extend(to_identifier(part) for part in package.split(".") if part)
    parts.append(to_identifier(name))
    return ".".join(parts)


def module_to_path(module: str) -> str:
    """Return the source file path of a dotted module path."""
    return module.replace(".", "/") + ".py"
