"""Command-line interface for packetforge code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from packetforge.generator import python
from packetforge.generator.config import GeneratorConfig
from packetforge.generator.layout import EncodingStrategy, Planner
from packetforge.generator.schema import ValidationError, load, validate
from packetforge.generator.types import ProtocolSchema, Record

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log each generation step")
def cli(verbose: bool) -> None:
    """Packetforge protocol code generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file (JSON)")
@click.option("--output", "-o", "output_dir", required=True, help="Output directory")
@click.option("--config", "config_file", default=None, help="Generator config file (JSON)")
@click.option("--package", default=None, help="Root package of the generated modules")
@click.option("--namespace-prefix", default=None, help="Namespace prefix stripped from packages")
@click.option("--runtime-import", default=None, help="Import path for runtime")
def gen(
    input_file: str,
    output_dir: str,
    config_file: str | None,
    package: str | None,
    namespace_prefix: str | None,
    runtime_import: str | None,
) -> None:
    """Generate protocol code from a schema file."""
    config = GeneratorConfig()
    if config_file is not None:
        with open(config_file, encoding="utf-8") as f:
            config = GeneratorConfig.from_json(f.read())
    if package is not None:
        config.package = package
    if namespace_prefix is not None:
        config.namespace_prefix = namespace_prefix
    if runtime_import is not None:
        config.runtime_import = runtime_import

    try:
        schema = load(input_file)
        logger.info(
            "Loaded %s: %d messages, %d types", input_file, len(schema.messages), len(schema.types)
        )
        artifacts = python.generate(schema, config)
    except ValidationError as err:
        print(f"Error: {err}")
        sys.exit(1)

    written = python.write(artifacts, output_dir)
    print(f"Generated {len(written)} files in {output_dir}")


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="packetforge_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file (JSON)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the messages and types of a schema."""
    try:
        schema = load(input_file)
        validate(schema)
    except ValidationError as err:
        print(f"Error: {err}")
        sys.exit(1)

    planner = Planner(schema)
    rows = [_summarize(planner, record) for record in [*schema.messages, *schema.types]]

    if output_json:
        _output_json(schema, rows)
    else:
        _output_plain(schema, rows)


def _summarize(planner: Planner, record: Record) -> dict:
    layout = planner.plan(record)
    polymorphic = sum(
        1
        for f in layout.fields
        if f.strategy == EncodingStrategy.POLYMORPHIC
        or (f.strategy == EncodingStrategy.OBJECT_VECTOR and f.polymorphic)
    )
    return {
        "name": record.name,
        "id": record.protocol_id,
        "parent": record.parent,
        "flags": len(layout.flags),
        "fields": len(layout.fields),
        "polymorphic": polymorphic,
        "module": layout.module,
    }


def _output_json(schema: ProtocolSchema, rows: list[dict]) -> None:
    """Output schema info as JSON."""
    count = len(schema.messages)
    data = {
        "messages": {row.pop("name"): row for row in rows[:count]},
        "types": {row.pop("name"): row for row in rows[count:]},
    }
    print(json.dumps(data, indent=2))


def _output_plain(schema: ProtocolSchema, rows: list[dict]) -> None:
    """Output schema info using rich text formatting."""
    console = Console()
    count = len(schema.messages)

    for title, section in (("Messages", rows[:count]), ("Types", rows[count:])):
        console.print(f"[bold cyan]{title}[/bold cyan]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("ID", style="green", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Parent", style="dim")
        table.add_column("Flags", style="yellow", justify="right")
        table.add_column("Fields", style="yellow", justify="right")
        table.add_column("Polymorphic", style="yellow", justify="right")

        for row in section:
            table.add_row(
                "" if row["id"] is None else str(row["id"]),
                row["name"],
                row["parent"] or "",
                str(row["flags"]),
                str(row["fields"]),
                str(row["polymorphic"]),
            )

        console.print(table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
