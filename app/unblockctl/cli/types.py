"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

import asyncio
import json
from collections.abc import Coroutine, Sequence
from enum import Enum
from pathlib import Path, PureWindowsPath
from typing import Any, NoReturn, TypeVar

import typer

from unblockctl.core.allowlist import parse_extension_list, toggle_office_formats
from unblockctl.core.config import UnblockConfig, load_config
from unblockctl.core.errors import ConfigError, UnblockctlError
from unblockctl.core.session import describe_error
from unblockctl.models.blocked_file import BlockedFileRecord
from unblockctl.utils.formatting import console, print_error, print_info
from unblockctl.utils.shell import PowerShellRunner

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def load_settings() -> UnblockConfig:
    """Load the user config, exiting with an error message if it is invalid."""
    try:
        return load_config()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def resolve_extensions(config: UnblockConfig, ext: str | None, office: bool) -> list[str]:
    """Combine ``--ext`` / ``--office`` with the configured allowlist.

    Args:
        config: Loaded user config.
        ext: Comma-separated override, or None to use the config allowlist.
        office: Add the Office formats to the result.

    Returns:
        Extension list (may be empty; the engine rejects empty allowlists).
    """
    extensions = parse_extension_list(ext) if ext is not None else list(config.extensions)
    if office:
        extensions = toggle_office_formats(True, extensions)
    return extensions


def build_runner(config: UnblockConfig) -> PowerShellRunner:
    """Create the PowerShell runner for the configured executable."""
    return PowerShellRunner(config.executable)


def exit_with_error(error: UnblockctlError) -> NoReturn:
    """Print one status line for an engine error and exit with code 1."""
    print_error(describe_error(error))
    raise typer.Exit(code=1) from error


def run_or_exit(coro: Coroutine[Any, Any, T]) -> T:
    """Run an engine coroutine, converting engine errors to exit code 1."""
    try:
        return asyncio.run(coro)
    except UnblockctlError as e:
        exit_with_error(e)


def split_paths(raw: str) -> list[str]:
    """Split a comma-separated ``--paths`` value, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def records_to_json(records: Sequence[BlockedFileRecord]) -> str:
    """Serialize records for ``--format json``."""
    return json.dumps([r.to_dict() for r in records])


def export_records(records: Sequence[BlockedFileRecord], export_path: Path) -> None:
    """Export records to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps([r.to_dict() for r in records], indent=2))
        print_info(f"Results exported to {export_path}")
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e


def filter_by_allowlist(paths: Sequence[str], extensions: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split paths into those with an allowed extension and the rest.

    Windows separators are understood on every platform.

    Returns:
        Tuple of (allowed, skipped) paths, each in input order.
    """
    allowed_set = {e.casefold() for e in extensions}
    allowed: list[str] = []
    skipped: list[str] = []
    for path in paths:
        if PureWindowsPath(path).suffix.casefold() in allowed_set:
            allowed.append(path)
        else:
            skipped.append(path)
    return allowed, skipped


def confirm_unblock(paths: Sequence[str]) -> bool:
    """Ask the user to confirm removing the marker from ``paths``."""
    console.print(
        "\nThis will remove the 'downloaded from the Internet' mark (Mark of the Web) "
        f"from {len(paths)} file(s).\n[warning]Proceed only if you trust the source.[/]"
    )
    return typer.confirm("Unblock these files?", default=False)
