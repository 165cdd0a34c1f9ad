"""Unblock command implementation.

Removes the Mark of the Web from an explicit list of files.
"""

from typing import Annotated

import typer

from unblockctl.cli.display import create_results_table, print_results_summary
from unblockctl.cli.types import (
    build_runner,
    confirm_unblock,
    exit_with_error,
    filter_by_allowlist,
    load_settings,
    resolve_extensions,
    run_or_exit,
    split_paths,
)
from unblockctl.core.allowlist import effective_set
from unblockctl.core.errors import NoSelectionError, UnblockctlError
from unblockctl.operators.zone import ZoneOperator
from unblockctl.utils.formatting import console, print_info, print_warning

app = typer.Typer(
    help="Remove the Mark of the Web from files.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def unblock_files(
    ctx: typer.Context,
    paths: Annotated[
        str,
        typer.Option(
            "--paths",
            "-p",
            help="Comma-separated list of files to unblock.",
        ),
    ],
    dry_run: Annotated[
        bool | None,
        typer.Option(
            "--dry-run/--commit",
            help="Simulate with -WhatIf, or really remove the marker (default from config).",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
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
        typer.Option("--office", help="Also allow Office documents (.docx, .xlsx, .pptx)."),
    ] = False,
) -> None:
    """Unblock the given files.

    Files whose extension is not on the allowlist are skipped. Committed
    runs ask for confirmation unless --yes is given.

    Examples:
        unblockctl unblock --paths C:/Downloads/a.pdf            # Dry run (default)
        unblockctl unblock --paths C:/Downloads/a.pdf --commit   # Remove the marker
    """
    if ctx.invoked_subcommand is not None:
        return

    config = load_settings()
    simulate = config.dry_run if dry_run is None else dry_run

    try:
        extensions = effective_set(resolve_extensions(config, ext, office))
    except UnblockctlError as e:
        exit_with_error(e)

    selected, skipped = filter_by_allowlist(split_paths(paths), extensions)
    for path in skipped:
        print_warning(f"Skipping {path}: extension not in allowlist")

    if not selected:
        exit_with_error(NoSelectionError("Select at least one file to unblock"))

    label = "Dry run" if simulate else "Unblocking"
    console.print(f"[bold_header]{label} {len(selected)} file(s)[/]")

    if not simulate and not yes and not confirm_unblock(selected):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    operator = ZoneOperator(build_runner(config), dry_run=simulate)
    batch = run_or_exit(operator.unblock(selected))

    console.print(create_results_table(batch.results))
    print_results_summary(batch.results, batch.dry_run)

    if batch.failed:
        raise typer.Exit(code=1)
