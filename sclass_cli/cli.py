"""Typer-based CLI for sclass: Solidity contracts to Mermaid class diagrams."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config
from .collection_store import load_collections
from .config_manager import (
    Settings,
    compile_patterns,
    load_settings,
    parse_format,
    parse_theme,
    save_settings,
)
from .errors import SclassError
from .exporter import write_output
from .models import ExcludeConfig
from .pipeline import DiagramPipeline, read_source

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="📐 sclass — Solidity contracts to Mermaid class diagrams.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"sclass v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """sclass: class diagrams for flattened Solidity files."""
    pass


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def _split_names(values: Optional[List[str]]) -> tuple:
    """Accept repeated options, comma lists, or a JSON array string."""
    names: List[str] = []
    for value in values or []:
        value = value.strip()
        if value.startswith("["):
            try:
                parsed = json.loads(value)
            except json.JSONDecodeError as exc:
                raise typer.BadParameter(f"Invalid JSON list: {value}") from exc
            if not isinstance(parsed, list):
                raise typer.BadParameter(f"Expected a JSON list: {value}")
            names.extend(str(item) for item in parsed)
        else:
            names.extend(part.strip() for part in value.split(",") if part.strip())
    return tuple(names)


def _apply_overrides(
    settings: Settings,
    *,
    output: Optional[Path],
    fmt: Optional[str],
    theme: Optional[str],
    exclude_interfaces: bool,
    exclude_libraries: bool,
    exclude: tuple,
    include: tuple,
    collections: tuple,
    exclude_functions: tuple,
    keep_functions: tuple,
    no_param_types: bool,
    check_naming: bool,
) -> Settings:
    contracts = settings.exclude.contracts
    contracts = replace(
        contracts,
        interfaces=contracts.interfaces or exclude_interfaces,
        libraries=contracts.libraries or exclude_libraries,
        collections=contracts.collections + collections,
        contracts=contracts.contracts + exclude,
        exceptions=contracts.exceptions + include,
    )
    functions = settings.exclude.functions
    functions = replace(
        functions,
        regexps=functions.regexps + compile_patterns(exclude_functions),
        exceptions=functions.exceptions + keep_functions,
    )
    output_config = replace(
        settings.output,
        file_path=output if output is not None else settings.output.file_path,
        format=parse_format(fmt) if fmt else settings.output.format,
        theme=parse_theme(theme) if theme else settings.output.theme,
    )
    return replace(
        settings,
        exclude=ExcludeConfig(contracts=contracts, functions=functions),
        output=output_config,
        disable_function_param_type=settings.disable_function_param_type or no_param_types,
        check_naming=settings.check_naming or check_naming,
    )


@app.command("diagram")
def diagram(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Flattened .sol file to diagram."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the diagram to a file (default: stdout)."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: mmd, md, svg, png, pdf."),
    theme: Optional[str] = typer.Option(None, "--theme", "-t", help="Mermaid theme: default, forest, dark, neutral."),
    exclude_interfaces: bool = typer.Option(False, "--exclude-interfaces", "-ei", help="Leave interfaces out."),
    exclude_libraries: bool = typer.Option(False, "--exclude-libraries", "-el", help="Leave libraries out."),
    exclude: Optional[List[str]] = typer.Option(None, "--exclude", "-e", help="Contract names to leave out."),
    include: Optional[List[str]] = typer.Option(None, "--include", "-i", help="Contract names always kept."),
    collection: Optional[List[str]] = typer.Option(None, "--collection", "-c", help="Exclude members of a collection."),
    exclude_functions: Optional[List[str]] = typer.Option(None, "--exclude-functions", "-ef", help="Regular expression of function names to leave out."),
    keep_function: Optional[List[str]] = typer.Option(None, "--keep-function", help="Function names always kept."),
    no_param_types: bool = typer.Option(False, "--no-param-types", help="Render parameter names only."),
    check_naming: bool = typer.Option(False, "--check-naming", help="Warn about internal members not prefixed with '_'."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a sclass TOML config."),
    verbose: bool = typer.Option(False, "--verbose", help="Log pipeline details."),
):
    """Render a Mermaid class diagram for FILE."""
    _configure_logging(verbose)

    if file.suffix != config.SOLIDITY_EXTENSION:
        raise typer.BadParameter("Invalid .sol file path", param_hint="FILE")

    try:
        settings = _apply_overrides(
            load_settings(config_path),
            output=output,
            fmt=fmt,
            theme=theme,
            exclude_interfaces=exclude_interfaces,
            exclude_libraries=exclude_libraries,
            exclude=_split_names(exclude),
            include=_split_names(include),
            collections=_split_names(collection),
            exclude_functions=tuple(exclude_functions or ()),
            keep_functions=_split_names(keep_function),
            no_param_types=no_param_types,
            check_naming=check_naming,
        )
        tables = load_collections(settings.collections_dirs)
        pipeline = DiagramPipeline(settings, tables)
        result = pipeline.collect(str(file), read_source(file))
        text = pipeline.render(result)

        for warning in result.warnings:
            err_console.print(f"[bold yellow][WARN][/bold yellow] {warning}")

        written = write_output(text, settings.output, file)
    except SclassError as exc:
        err_console.print(f"[red]❌ {exc}[/red]")
        raise typer.Exit(code=1)

    if written is None:
        typer.echo(text, nl=False)
    else:
        console.print(f"Wrote diagram to {written}")


@app.command("collections")
def collections(
    name: Optional[str] = typer.Argument(None, help="Show the members of one collection."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to a sclass TOML config."),
):
    """List the available contract collections."""
    try:
        settings = load_settings(config_path)
        tables = load_collections(settings.collections_dirs)
    except SclassError as exc:
        err_console.print(f"[red]❌ {exc}[/red]")
        raise typer.Exit(code=1)

    if name is not None:
        if name not in tables:
            raise typer.BadParameter(f"Collection '{name}' not found.")
        for member in tables[name]:
            typer.echo(member)
        return

    table = Table(title="Collections")
    table.add_column("Name", style="cyan")
    table.add_column("Contracts", justify="right")
    for collection_name, members in tables.items():
        table.add_row(collection_name, str(len(members)))
    console.print(table)


@app.command("init-config")
def init_config(
    path: Path = typer.Option(Path(config.LOCAL_CONFIG_NAME), "--path", "-p", help="Where to write the config."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
):
    """Write a default sclass.toml."""
    if path.exists() and not force:
        raise typer.BadParameter(f"{path} already exists; use --force to overwrite.")
    save_settings(Settings(), path)
    typer.echo(f"Wrote default config to {path}")


if __name__ == "__main__":
    app()
