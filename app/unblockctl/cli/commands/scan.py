"""Scan command implementation.

Lists files that still carry the Mark of the Web (Zone.Identifier).
"""

from pathlib import Path
from typing import Annotated

import typer

from unblockctl.cli.display import print_blocked_files
from unblockctl.cli.types import (
    OutputFormat,
    build_runner,
    exit_with_error,
    export_records,
    load_settings,
    records_to_json,
    resolve_extensions,
    run_or_exit,
)
from unblockctl.core.errors import UnblockctlError
from unblockctl.core.session import Session, SessionConfig
from unblockctl.scanners.zone import ZoneScanner
from unblockctl.utils.formatting import console, print_log_line, print_warning
from unblockctl.utils.shell import is_windows

app = typer.Typer(
    help="Scan a folder for blocked files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_files(
    ctx: typer.Context,
    directory: Annotated[
        Path,
        typer.Option(
            "--dir",
            "-d",
            help="Folder to scan.",
        ),
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
        typer.Option(
            "--office",
            help="Also include Office documents (.docx, .xlsx, .pptx).",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            help="Export scan results to JSON file.",
        ),
    ] = None,
) -> None:
    """Scan a folder and list files carrying the Mark of the Web.

    Only files whose extension is on the allowlist are reported. Results
    are sorted by path.

    Examples:
        unblockctl scan --dir ~/Downloads                 # Configured allowlist
        unblockctl scan --dir ~/Downloads -r              # Include subfolders
        unblockctl scan --dir ~/Downloads --ext .pdf,.md  # Explicit allowlist
        unblockctl scan --dir ~/Downloads --office        # Add Office formats
        unblockctl scan --dir ~/Downloads --format json   # Output as JSON
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings()
    if not is_windows():
        print_warning("Zone.Identifier streams only exist on Windows (NTFS) volumes.")

    try:
        session_config = SessionConfig.create(
            directory,
            recursive=config.recursive if recursive is None else recursive,
            dry_run=config.dry_run,
            extensions=resolve_extensions(config, ext, office),
        )
    except UnblockctlError as e:
        exit_with_error(e)

    # No status lines in JSON mode
    log_sink = None if output_format == OutputFormat.JSON else print_log_line
    session = Session(ZoneScanner(build_runner(config)), log_sink=log_sink)
    records = run_or_exit(session.scan(session_config))

    if export_path is not None:
        export_records(records, export_path)

    if output_format == OutputFormat.JSON:
        console.print_json(records_to_json(records))
        return

    print_blocked_files(records)
