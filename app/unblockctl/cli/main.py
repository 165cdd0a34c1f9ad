"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from unblockctl import __version__
from unblockctl.cli.commands import allowlist, config, run, scan, unblock
from unblockctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="unblockctl",
    help="Find and clear the Mark of the Web on trusted files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"unblockctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool = False) -> None:
    """Route library logging through Rich on stderr."""
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log errors.",
        ),
    ] = False,
) -> None:
    """unblockctl - find and clear the Mark of the Web on trusted files.

    Scans a folder for files carrying the Zone.Identifier stream, limited
    to an extension allowlist, and removes the marker on request.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose, quiet)


# Register commands
app.add_typer(scan.app, name="scan")
app.add_typer(unblock.app, name="unblock")
app.add_typer(run.app, name="run")
app.add_typer(allowlist.app, name="allowlist")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
