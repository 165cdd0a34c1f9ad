"""Shared Rich display functions for scan and unblock results."""

from collections.abc import Sequence

from rich.markup import escape
from rich.table import Table

from unblockctl.models.blocked_file import BlockedFileRecord, format_bytes
from unblockctl.models.outcome import UnblockResult
from unblockctl.utils.formatting import (
    console,
    create_blocked_table,
    format_blocked_row,
    print_info,
    print_success,
    print_warning,
)


def print_blocked_files(records: Sequence[BlockedFileRecord], title: str = "Blocked Files") -> None:
    """Print scan results as a table followed by a summary line.

    Args:
        records: Sorted scan results.
        title: Table title.
    """
    if not records:
        print_success("No blocked files found (within allowlist).")
        return

    table = create_blocked_table(title)
    for record in records:
        table.add_row(*format_blocked_row(record))
    console.print(table)

    total = sum(r.length for r in records)
    console.print(f"\n[dim]Found {len(records)} blocked file(s) ({format_bytes(total)} total)[/dim]")


def create_results_table(results: Sequence[UnblockResult]) -> Table:
    """Create a Rich table displaying per-path unblock results.

    Args:
        results: Per-path results of one batch.

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title="Unblock Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Path", overflow="fold")
    table.add_column("Details", style="muted")

    for r in results:
        if r.failed:
            status = "[error]FAIL[/]"
            detail = r.error or "Unknown error"
        elif r.dry_run:
            status = "[info]dry-run[/]"
            detail = "Would unblock"
        else:
            status = "[success]OK[/]"
            detail = "Unblocked"
        table.add_row(status, escape(r.path), escape(detail))

    return table


def print_results_summary(results: Sequence[UnblockResult], dry_run: bool) -> None:
    """Print a one-line summary of an unblock batch.

    Args:
        results: Per-path results.
        dry_run: Whether the batch was a simulation.
    """
    success_count = sum(1 for r in results if r.success)
    fail_count = sum(1 for r in results if r.failed)

    if fail_count:
        print_warning(f"{success_count} succeeded, {fail_count} failed")
    elif dry_run:
        print_info(f"Dry run: {success_count} file(s) would be unblocked (no changes made).")
    else:
        print_success(f"All {success_count} file(s) unblocked.")
