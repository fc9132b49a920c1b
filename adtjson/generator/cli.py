"""Command-line interface for adtjson code generation."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from adtjson.generator import python
from adtjson.generator.closure import GenerationError
from adtjson.generator.naming import MANGLERS
from adtjson.generator.options import GeneratorOptions, Profile
from adtjson.generator.parser import ValidationError, load
from adtjson.generator.surface import LogicSurface, describe_surface

logger = logging.getLogger("adtjson")


def _setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Generate JSON converters for algebraic datatypes."""
    _setup_logging(verbose)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration or JSON file")
@click.option("--output", "-o", "output_file", default=None, help="Output file (default: stdout)")
@click.option(
    "--profile",
    type=click.Choice([p.value for p in Profile]),
    default=Profile.BARE.value,
    help="Output profile",
)
@click.option("--domain-module", default=None, help="Domain module (default: module declaring Action)")
@click.option("--app-core", "app_core_module", default="AppCore", help="Module holding the functions")
@click.option(
    "--runtime-import",
    "runtime_import",
    is_flag=False,
    flag_value="adtjson.runtime",
    default=None,
    help="Import path for runtime. No value=adtjson.runtime, omit=no import",
)
@click.option("--modules-import", default=None, help="Package to import the datatype modules from")
@click.option(
    "--mangle",
    type=click.Choice(list(MANGLERS)),
    default="dafny",
    help="Naming convention of the runtime's constructors and accessors",
)
def gen(
    input_file: str,
    output_file: str | None,
    profile: str,
    domain_module: str | None,
    app_core_module: str,
    runtime_import: str | None,
    modules_import: str | None,
    mangle: str,
) -> None:
    """Generate converters from a declaration file."""
    options = GeneratorOptions(
        profile=Profile(profile),
        domain_module=domain_module,
        app_core_module=app_core_module,
        runtime_import=runtime_import,
        modules_import=modules_import,
        mangle=mangle,
    )

    try:
        catalog = load(input_file)
        generated_file = python.render(catalog, options)
    except (GenerationError, ValidationError, LarkError) as e:
        logger.error("%s", e)
        sys.exit(1)

    if output_file is None:
        click.echo(generated_file, nl=False)
        return

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)
    logger.info("Wrote %s", output_file)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="adtjson_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration or JSON file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the datatypes and functions a catalog exposes."""
    try:
        surface = describe_surface(load(input_file))
    except (GenerationError, ValidationError, LarkError) as e:
        logger.error("%s", e)
        sys.exit(1)

    if output_json:
        print(surface.to_json(indent=2))
    else:
        _output_plain(surface)


def _output_plain(surface: LogicSurface) -> None:
    """Output the surface using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Datatypes[/bold cyan]")
    dt_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    dt_table.add_column("Name", style="white")
    dt_table.add_column("Module", style="dim")
    dt_table.add_column("Constructors", style="yellow")

    for dt in surface.datatypes:
        ctors = ", ".join(
            f"{c.name}({', '.join(f'{f.name}: {f.type}' for f in c.fields)})" if c.fields else c.name
            for c in dt.constructors
        )
        dt_table.add_row(dt.name, dt.module, ctors)

    console.print(dt_table)
    console.print()

    if surface.actions:
        console.print("[bold cyan]Actions[/bold cyan]")
        action_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        action_table.add_column("Name", style="white")
        action_table.add_column("Fields", style="dim")
        for action in surface.actions:
            action_table.add_row(action.name, ", ".join(f"{f.name}: {f.type}" for f in action.fields))
        console.print(action_table)
        console.print()

    if surface.has_app_core:
        console.print("[bold cyan]Functions[/bold cyan]")
        fn_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        fn_table.add_column("Name", style="white")
        fn_table.add_column("Parameters", style="dim")
        fn_table.add_column("Returns", style="green")
        for fn in surface.app_core_functions:
            fn_table.add_row(fn.name, ", ".join(f"{p.name}: {p.type}" for p in fn.params), fn.return_type)
        console.print(fn_table)
        console.print()

    console.print("[bold cyan]Generated converters[/bold cyan]")
    console.print(", ".join(surface.generation_set) or "none")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
