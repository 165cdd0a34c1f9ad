"""Run command implementation.

Runs a full session: scan, select, confirm, unblock and rescan.
"""

from collections.abc import Sequence
from pathlib import Path, PureWindowsPath
from typing import Annotated

import typer

from unblockctl.cli.display import (
    create_results_table,
    print_blocked_files,
    print_results_summary,
)
from unblockctl.cli.types import (
    build_runner,
    confirm_unblock,
    exit_with_error,
    load_settings,
    resolve_extensions,
    run_or_exit,
)
from unblockctl.core.errors import UnblockctlError
from unblockctl.core.session import Session, SessionConfig
from unblockctl.models.blocked_file import BlockedFileRecord
from unblockctl.scanners.zone import ZoneScanner
from unblockctl.utils.formatting import console, print_info, print_log_line

app = typer.Typer(
    help="Scan a folder and unblock the files found.",
    invoke_without_command=True,
)


def _matches(record: BlockedFileRecord, pattern: str) -> bool:
    """Match a record by full path or file name, case-insensitively."""
    key = pattern.strip().casefold()
    return key in (record.full_name.casefold(), record.name.casefold()) or (
        PureWindowsPath(pattern).as_posix().casefold()
        == PureWindowsPath(record.full_name).as_posix().casefold()
    )


def resolve_selection(
    records: Sequence[BlockedFileRecord],
    include: Sequence[str],
    exclude: Sequence[str],
) -> list[str]:
    """Pick the paths to unblock from a scan result.

    Everything is selected unless ``include`` narrows it down; ``exclude``
    is applied last.

    Returns:
        Selected full paths, in result order.
    """
    selected = [
        r for r in records if not include or any(_matches(r, pattern) for pattern in include)
    ]
    return [
        r.full_name for r in selected if not any(_matches(r, pattern) for pattern in exclude)
    ]


@app.callback(invoke_without_command=True)
def run_session(
    ctx: typer.Context,
    directory: Annotated[
        Path,
        typer.Option("--dir", "-d", help="Folder to scan."),
    ],
    recursive: Annotated[
        bool | None,
        typer.Option(
            "--recursive/--no-recursive",
            "-r/-R",
            help="Include subfolders (default from config).",
        ),
    ] = None,
    ext: Annotated[
        str | None,
        typer.Option(
            "--ext",
            "-e",
            help="Comma-separated allowlist, e.g. .pdf,.txt (default from config).",
        ),
    ] = None,
    office: Annotated[
        bool,
        typer.Option("--office", help="Also include Office documents (.docx, .xlsx, .pptx)."),
    ] = False,
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--commit",
            help="Simulate with -WhatIf, or really remove the marker (default from config).",
        ),
    ] = None,
    include: Annotated[
        list[str] | None,
        typer.Option("--include", "-i", help="Only unblock this file (path or name). Repeatable."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Do not unblock this file (path or name). Repeatable."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Scan a folder, unblock the selected files and refresh the list.

    A committed run asks for confirmation (unless --yes) and rescans the
    folder afterwards to show what is still blocked.

    Examples:
        unblockctl run --dir ~/Downloads                      # Dry run
        unblockctl run --dir ~/Downloads --commit             # Unblock everything found
        unblockctl run --dir ~/Downloads --commit -x b.pdf    # ...except b.pdf
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings()

    try:
        session_config = SessionConfig.create(
            directory,
            recursive=config.recursive if recursive is None else recursive,
            dry_run=config.dry_run if dry_run is None else dry_run,
            extensions=resolve_extensions(config, ext, office),
        )
    except UnblockctlError as e:
        exit_with_error(e)

    confirm = (lambda paths: True) if yes else confirm_unblock
    session = Session(
        ZoneScanner(build_runner(config)),
        log_sink=print_log_line,
        confirm=confirm,
    )

    records = run_or_exit(session.scan(session_config))
    print_blocked_files(records)
    if not records:
        return

    try:
        session.select(resolve_selection(records, include or [], exclude or []))
    except UnblockctlError as e:
        exit_with_error(e)

    batch = run_or_exit(session.unblock(session_config))
    if batch is None:
        print_info("Aborted.")
        return

    console.print(create_results_table(batch.results))
    print_results_summary(batch.results, batch.dry_run)

    if not batch.dry_run:
        print_blocked_files(session.records, title="Still Blocked")

    if batch.failed:
        raise typer.Exit(code=1)
