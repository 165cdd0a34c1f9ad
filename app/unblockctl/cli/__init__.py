"""CLI package for unblockctl.

This package contains the Typer application and all subcommands.
"""

from unblockctl.cli.main import app

__all__ = ["app"]
