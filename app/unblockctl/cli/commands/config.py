"""Config inspection commands."""

from typing import Annotated

import typer
from rich.table import Table

from unblockctl.cli.types import exit_with_error, load_settings
from unblockctl.core.config import save_config
from unblockctl.core.errors import UnblockctlError
from unblockctl.core.paths import get_config_path
from unblockctl.utils.formatting import console, print_info, print_success
from unblockctl.utils.shell import PowerShellRunner

app = typer.Typer(
    help="Show and change default settings.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective settings."""
    config = load_settings()
    runner = PowerShellRunner(config.executable)

    table = Table(title="Settings", header_style="bold_header", border_style="border")
    table.add_column("Setting", no_wrap=True)
    table.add_column("Value")
    table.add_row("config file", str(get_config_path()))
    table.add_row("recursive", str(config.recursive).lower())
    table.add_row("dry_run", str(config.dry_run).lower())
    table.add_row("executable", config.executable or "(search PATH)")
    table.add_row("resolved", runner.executable or "[error]not found[/]")
    table.add_row("extensions", ", ".join(config.extensions) or "[warning](empty)[/]")
    console.print(table)


@app.command()
def path() -> None:
    """Print the config file path."""
    typer.echo(str(get_config_path()))


@app.command("set")
def set_defaults(
    recursive: Annotated[
        bool | None,
        typer.Option("--recursive/--no-recursive", help="Include subfolders by default."),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option("--dry-run/--commit", help="Simulate unblocking by default."),
    ] = None,
    executable: Annotated[
        str | None,
        typer.Option("--executable", help="PowerShell executable ('' to search PATH)."),
    ] = None,
) -> None:
    """Change default settings."""
    config = load_settings()
    updates: dict[str, object] = {}
    if recursive is not None:
        updates["recursive"] = recursive
    if dry_run is not None:
        updates["dry_run"] = dry_run
    if executable is not None:
        updates["executable"] = executable or None

    if not updates:
        print_info("Nothing to change.")
        return

    try:
        saved = save_config(config.model_copy(update=updates))
    except UnblockctlError as e:
        exit_with_error(e)
    print_success(f"Updated {', '.join(sorted(updates))} in {saved}")
