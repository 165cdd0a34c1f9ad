"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from unblockctl.models.blocked_file import BlockedFileRecord

_STYLES: dict[str, str] = {
    "text": "#ffffff",
    "muted": "#b2bec3",
    "dim": "#b2bec3",
    "header": "#69B9A1",
    "bold_header": "bold #69B9A1",
    "border": "#29526d",
    "success": "#03b971",
    "warning": "#f5b332",
    "error": "bold #f53263",
    "info": "#0ec1c8",
    "blocked": "bold #f5b332",
    "path": "#ffffff",
}

THEME = Theme(_STYLES)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def create_blocked_table(title: str = "Blocked Files") -> Table:
    """Create a pre-configured table for displaying blocked files.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for blocked file display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("File", no_wrap=True)
    table.add_column("Ext", style="muted", width=6)
    table.add_column("Size", style="info", justify="right")
    table.add_column("Last Modified", style="muted")
    table.add_column("Path", style="muted", overflow="fold")
    return table


def format_blocked_row(record: BlockedFileRecord) -> tuple[str, str, str, str, str]:
    """Format a blocked file as a table row with Rich markup.

    Args:
        record: The blocked file to format.

    Returns:
        Tuple of (name, ext, size, last modified, path).
    """
    return (
        f"[blocked]{escape(record.name)}[/]",
        escape(record.ext),
        record.size_human,
        record.last_write_time or "-",
        escape(record.full_name),
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def print_log_line(line: str) -> None:
    """Print a timestamped session log line."""
    err_console.print(escape(line), style="dim", highlight=False)
