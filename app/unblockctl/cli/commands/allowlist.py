"""Allowlist management commands.

The allowlist is persisted in the user config file and used as the default
for scan, unblock and run.
"""

from typing import Annotated

import typer
from rich.table import Table

from unblockctl.cli.types import exit_with_error, load_settings
from unblockctl.core.allowlist import DEFAULT_EXTENSIONS, OFFICE_EXTENSIONS
from unblockctl.core.config import UnblockConfig, save_config
from unblockctl.core.errors import UnblockctlError
from unblockctl.utils.formatting import console, print_info, print_success, print_warning

app = typer.Typer(
    help="Manage the extension allowlist.",
    no_args_is_help=True,
)


def _save(config: UnblockConfig) -> None:
    try:
        path = save_config(config)
    except UnblockctlError as e:
        exit_with_error(e)
    print_info(f"Saved to {path}")


@app.command("list")
def list_extensions() -> None:
    """Show the allowed extensions."""
    config = load_settings()
    if not config.extensions:
        print_warning("The allowlist is empty; scans will be rejected.")
        return

    office = {e.casefold() for e in OFFICE_EXTENSIONS}
    table = Table(title="Allowed Extensions", header_style="bold_header", border_style="border")
    table.add_column("Extension", no_wrap=True)
    table.add_column("Group", style="muted")
    for ext in config.extensions:
        table.add_row(ext, "office" if ext in office else "")
    console.print(table)


@app.command()
def add(
    extensions: Annotated[list[str], typer.Argument(help="Extensions to add, e.g. .rtf")],
) -> None:
    """Add extensions to the allowlist."""
    config = load_settings()
    allowlist = config.allowlist()
    try:
        added = [allowlist.add(ext) for ext in extensions]
    except UnblockctlError as e:
        exit_with_error(e)

    _save(config.model_copy(update={"extensions": allowlist.entries}))
    print_success(f"Added: {', '.join(added)}")


@app.command()
def remove(
    extensions: Annotated[list[str], typer.Argument(help="Extensions to remove")],
) -> None:
    """Remove extensions from the allowlist."""
    config = load_settings()
    allowlist = config.allowlist()
    missing = [ext for ext in extensions if not allowlist.remove(ext)]
    for ext in missing:
        print_warning(f"Not in allowlist: {ext}")

    _save(config.model_copy(update={"extensions": allowlist.entries}))
    if not allowlist.entries:
        print_warning("The allowlist is now empty; scans will be rejected.")


@app.command()
def office(
    enable: Annotated[
        bool,
        typer.Option("--enable/--disable", help="Add or remove .docx, .xlsx and .pptx."),
    ] = True,
) -> None:
    """Toggle the Office formats (Word / Excel / PowerPoint).

    Only enable this if you trust the file source.
    """
    config = load_settings()
    allowlist = config.allowlist()
    allowlist.set_office_formats(enable)

    _save(config.model_copy(update={"extensions": allowlist.entries}))
    state = "enabled" if enable else "disabled"
    print_success(f"Office formats {state}: {', '.join(OFFICE_EXTENSIONS)}")


@app.command()
def reset() -> None:
    """Restore the default allowlist (Office formats excluded)."""
    config = load_settings()
    _save(config.model_copy(update={"extensions": list(DEFAULT_EXTENSIONS)}))
    print_success(f"Allowlist reset to {len(DEFAULT_EXTENSIONS)} default extension(s).")
