"""Zone.Identifier operator.

Removes the Mark of the Web from a batch of files with ``Unblock-File``.
Dry runs take the same path with ``-WhatIf`` switched on.
"""

import logging
from collections.abc import Sequence

from unblockctl.core.errors import NoSelectionError, UnblockFailedError
from unblockctl.models.outcome import OperationOutcome, UnblockBatch, UnblockResult
from unblockctl.utils.shell import PowerShellRunner, ps_bool, quote_array

logger = logging.getLogger(__name__)

# One tab-separated status line per path. Other stdout lines (WhatIf
# notices) are ignored by the parser.
_UNBLOCK_TEMPLATE = """\
$paths = {paths}
$whatIf = {what_if}

foreach ($p in $paths) {{
  try {{
    Unblock-File -LiteralPath $p -ErrorAction Stop -WhatIf:$whatIf
    [Console]::Out.WriteLine("OK`t$p")
  }} catch {{
    $msg = $_.Exception.Message -replace '[\\r\\n\\t]+', ' '
    [Console]::Out.WriteLine("FAIL`t$p`t$msg")
    [Console]::Error.WriteLine("Failed: $p -> $msg")
  }}
}}
"""

_STATUS_OK = "OK"
_STATUS_FAIL = "FAIL"


def build_unblock_script(paths: Sequence[str], dry_run: bool) -> str:
    """Build the unblock script for a batch of paths.

    Args:
        paths: Files to unblock.
        dry_run: If True, the script passes ``-WhatIf:$true``.

    Returns:
        PowerShell script text.
    """
    return _UNBLOCK_TEMPLATE.format(paths=quote_array(paths), what_if=ps_bool(dry_run))


def parse_unblock_output(
    stdout: str,
    paths: Sequence[str],
    dry_run: bool,
) -> list[UnblockResult]:
    """Map the script's status lines to one result per requested path.

    Args:
        stdout: Captured standard output.
        paths: Paths in request order.
        dry_run: Whether the batch was a simulation.

    Returns:
        Results in request order. A path without a status line is
        reported as failed.
    """
    reported: dict[str, UnblockResult] = {}

    for line in stdout.splitlines():
        parts = line.rstrip("\r").split("\t", 2)
        if len(parts) < 2 or parts[0] not in (_STATUS_OK, _STATUS_FAIL):
            if line.strip():
                logger.debug("Ignoring unblock output line: %r", line[:200])
            continue

        status, path = parts[0], parts[1]
        if status == _STATUS_OK:
            reported[path] = UnblockResult(path=path, success=True, dry_run=dry_run)
        else:
            error = parts[2].strip() if len(parts) == 3 and parts[2].strip() else "Unknown error"
            reported[path] = UnblockResult(path=path, success=False, error=error, dry_run=dry_run)

    return [
        reported.get(path)
        or UnblockResult(path=path, success=False, error="No result reported", dry_run=dry_run)
        for path in paths
    ]


class ZoneOperator:
    """Operator that clears the Zone.Identifier stream.

    The operator never touches scan results; callers rescan after a
    committed batch to refresh their view.

    Attributes:
        dry_run: If True, uses ``-WhatIf`` to simulate the batch.

    Example:
        >>> operator = ZoneOperator(dry_run=True)
        >>> batch = asyncio.run(operator.unblock(["C:/Downloads/a.pdf"]))
    """

    def __init__(self, runner: PowerShellRunner | None = None, dry_run: bool = False) -> None:
        """Initialize the operator.

        Args:
            runner: PowerShell runner. If None, a default runner is created.
            dry_run: If True, only simulate unblocking.
        """
        self._runner = runner if runner is not None else PowerShellRunner()
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if operator is in dry-run mode."""
        return self._dry_run

    def is_available(self) -> bool:
        """Check if PowerShell is available."""
        return self._runner.is_available()

    async def unblock(self, paths: Sequence[str]) -> UnblockBatch:
        """Remove (or simulate removing) the marker from each path.

        Per-path failures are reported in the batch and do not stop the
        remaining paths.

        Args:
            paths: Files to unblock.

        Returns:
            UnblockBatch with one result per path.

        Raises:
            NoSelectionError: If ``paths`` is empty.
            ToolInvocationFailedError: If PowerShell cannot be run.
            UnblockFailedError: If the script exits with a non-zero status.
        """
        batch_paths = tuple(paths)
        if not batch_paths:
            msg = "Select at least one file to unblock"
            raise NoSelectionError(msg)

        logger.info(
            "%s %d file(s)",
            "Dry-run unblocking" if self._dry_run else "Unblocking",
            len(batch_paths),
        )
        outcome: OperationOutcome = await self._runner.invoke(
            build_unblock_script(batch_paths, self._dry_run)
        )

        if outcome.stderr.strip():
            logger.warning("Unblock reported errors: %s", outcome.stderr.strip())

        if not outcome.success:
            raise UnblockFailedError(outcome.returncode, outcome.stderr)

        results = parse_unblock_output(outcome.stdout, batch_paths, self._dry_run)
        return UnblockBatch(outcome=outcome, results=tuple(results), dry_run=self._dry_run)
