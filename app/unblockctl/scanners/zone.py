"""Zone.Identifier scanner.

Enumerates files under a directory in a single PowerShell invocation and
reports the ones that still carry the Mark of the Web.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from unblockctl.core.allowlist import effective_set
from unblockctl.core.errors import InvalidFolderError, ScanFailedError, ScanResultParseError
from unblockctl.models.blocked_file import BlockedFileRecord
from unblockctl.utils.shell import PowerShellRunner, ps_bool, quote_array, quote_literal

logger = logging.getLogger(__name__)

# LastWriteTimeStr is formatted in the script so no locale-dependent date
# ever reaches the JSON payload.
_SCAN_TEMPLATE = """\
$folder = {folder}
$recurse = {recurse}
$exts = {extensions}

$items = Get-ChildItem -LiteralPath $folder -File -Force -Recurse:$recurse |
  Where-Object {{ $exts -contains $_.Extension.ToLower() }} |
  ForEach-Object {{
    $zi = Get-Item -LiteralPath $_.FullName -Stream Zone.Identifier -ErrorAction SilentlyContinue
    if ($zi) {{
      [pscustomobject]@{{
        FullName = $_.FullName
        Name = $_.Name
        Ext = $_.Extension
        Length = $_.Length
        LastWriteTimeStr = $_.LastWriteTime.ToString('yyyy-MM-dd HH:mm:ss', [Globalization.CultureInfo]::InvariantCulture)
      }}
    }}
  }}

$items | ConvertTo-Json -Compress
"""

_REQUIRED_FIELDS: tuple[str, ...] = ("FullName", "Name", "Ext")


def build_scan_script(directory: str, recursive: bool, extensions: Sequence[str]) -> str:
    """Build the enumeration script.

    Args:
        directory: Directory to scan.
        recursive: Include subfolders.
        extensions: Normalized allowlist snapshot.

    Returns:
        PowerShell script text.
    """
    return _SCAN_TEMPLATE.format(
        folder=quote_literal(directory),
        recurse=ps_bool(recursive),
        extensions=quote_array(extensions),
    )


def _parse_row(row: Any, index: int) -> BlockedFileRecord:
    if not isinstance(row, dict):
        msg = f"Row {index}: expected an object, got {type(row).__name__}"
        raise ScanResultParseError(msg)

    values: dict[str, str] = {}
    for field in _REQUIRED_FIELDS:
        value = row.get(field)
        if not isinstance(value, str):
            msg = f"Row {index}: missing or invalid '{field}'"
            raise ScanResultParseError(msg)
        values[field] = value

    length = row.get("Length")
    if length is None:
        length = 0
    elif isinstance(length, bool) or not isinstance(length, int) or length < 0:
        msg = f"Row {index}: 'Length' must be a non-negative integer, got {length!r}"
        raise ScanResultParseError(msg)

    last_write = row.get("LastWriteTimeStr")
    if last_write is None:
        last_write = ""
    elif not isinstance(last_write, str):
        msg = f"Row {index}: 'LastWriteTimeStr' must be a string"
        raise ScanResultParseError(msg)

    try:
        return BlockedFileRecord(
            full_name=values["FullName"],
            name=values["Name"],
            ext=values["Ext"],
            length=length,
            last_write_time=last_write,
        )
    except ValueError as e:
        raise ScanResultParseError(f"Row {index}: {e}") from e


def parse_scan_output(stdout: str) -> list[BlockedFileRecord]:
    """Parse the JSON payload written by the scan script.

    ConvertTo-Json emits nothing (or ``null``) for zero rows, a bare object
    for one row and an array for several; all three are accepted.

    Args:
        stdout: Captured standard output.

    Returns:
        Records in payload order.

    Raises:
        ScanResultParseError: If the payload is not valid JSON or a row does
            not match the schema.
    """
    text = stdout.strip()
    if not text:
        return []

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ScanResultParseError(f"Scan output is not valid JSON: {e}") from e

    if payload is None:
        return []
    if isinstance(payload, dict):
        return [_parse_row(payload, 0)]
    if isinstance(payload, list):
        return [_parse_row(row, i) for i, row in enumerate(payload)]

    msg = f"Unexpected scan output: {type(payload).__name__}"
    raise ScanResultParseError(msg)


def validate_directory(directory: str | Path) -> Path:
    """Check that the scan target is an existing directory.

    Returns:
        Absolute path of the directory.

    Raises:
        InvalidFolderError: If the path is empty, missing, or not a directory.
    """
    if not str(directory).strip():
        msg = "Select a folder first"
        raise InvalidFolderError(msg)
    path = Path(directory).expanduser()
    if not path.is_dir():
        msg = f"Not a directory: {path}"
        raise InvalidFolderError(msg)
    return path.resolve()


class ZoneScanner:
    """Scanner for files carrying the Zone.Identifier stream.

    Example:
        >>> scanner = ZoneScanner(PowerShellRunner())
        >>> records = asyncio.run(scanner.scan("C:/Downloads", False, [".pdf"]))
    """

    def __init__(self, runner: PowerShellRunner | None = None) -> None:
        self._runner = runner if runner is not None else PowerShellRunner()

    @property
    def runner(self) -> PowerShellRunner:
        """The PowerShell runner used for invocations."""
        return self._runner

    def is_available(self) -> bool:
        """Check if PowerShell is available."""
        return self._runner.is_available()

    async def scan(
        self,
        directory: str | Path,
        recursive: bool,
        extensions: Sequence[str],
    ) -> list[BlockedFileRecord]:
        """Scan a directory for blocked files.

        Args:
            directory: Directory to scan.
            recursive: Include subfolders.
            extensions: Allowed extensions.

        Returns:
            Blocked files sorted by full path, case-insensitively.

        Raises:
            InvalidFolderError: If the directory is invalid.
            EmptyAllowlistError: If no extension is allowed.
            ToolInvocationFailedError: If PowerShell cannot be run.
            ScanFailedError: If the script exits with a non-zero status.
            ScanResultParseError: If the output cannot be parsed.
        """
        folder = validate_directory(directory)
        allowed = effective_set(extensions)

        logger.info(
            "Scanning %s (recursive=%s, extensions=%s)",
            folder,
            recursive,
            ", ".join(allowed),
        )
        outcome = await self._runner.invoke(build_scan_script(str(folder), recursive, allowed))

        if outcome.stderr.strip():
            logger.warning("Scan reported errors: %s", outcome.stderr.strip())

        if not outcome.success:
            raise ScanFailedError(outcome.returncode, outcome.stderr)

        records: list[BlockedFileRecord] = []
        for record in parse_scan_output(outcome.stdout):
            if record.ext.lower() not in allowed:
                logger.warning("Dropping %s: extension outside the allowlist", record.full_name)
                continue
            records.append(record)

        records.sort(key=lambda r: r.sort_key)
        logger.info("Scan complete: %d blocked file(s)", len(records))
        return records
