"""Session orchestration.

The session sequences scan, select, unblock and rescan, and owns the single
operation slot: a scan or unblock may only start from ``IDLE``, and the slot
is released when the operation finishes, whether it succeeded or not.

States::

    IDLE -> SCANNING -> IDLE
    IDLE -> UNBLOCKING -> SCANNING -> IDLE   (committed batch, auto-refresh)
    IDLE -> UNBLOCKING -> IDLE               (dry run or failure)
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from unblockctl.core.allowlist import effective_set
from unblockctl.core.errors import (
    NoSelectionError,
    OperationInProgressError,
    ScanResultParseError,
    StaleSelectionError,
    ToolFailedError,
    ToolInvocationFailedError,
    UnblockctlError,
    ValidationError,
)
from unblockctl.models.blocked_file import BlockedFileRecord
from unblockctl.models.outcome import UnblockBatch
from unblockctl.operators.zone import ZoneOperator
from unblockctl.scanners.zone import ZoneScanner, validate_directory

logger = logging.getLogger(__name__)

LogSink = Callable[[str], None]
ConfirmCallback = Callable[[Sequence[str]], bool]
OperatorFactory = Callable[[bool], ZoneOperator]


class SessionState(str, Enum):
    """Operation slot state.

    Attributes:
        IDLE: No operation in flight; scan and unblock may start.
        SCANNING: A scan is running.
        UNBLOCKING: An unblock batch is running.
    """

    IDLE = "idle"
    SCANNING = "scanning"
    UNBLOCKING = "unblocking"


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Inputs for one operation, captured when it starts.

    Attributes:
        directory: Validated absolute directory.
        recursive: Include subfolders.
        dry_run: Simulate unblocking.
        extensions: Allowlist snapshot.
    """

    directory: Path
    recursive: bool
    dry_run: bool
    extensions: tuple[str, ...]

    @classmethod
    def create(
        cls,
        directory: str | Path,
        *,
        recursive: bool,
        dry_run: bool,
        extensions: Iterable[str],
    ) -> "SessionConfig":
        """Validate inputs and build a config snapshot.

        Raises:
            InvalidFolderError: If the directory is invalid.
            EmptyAllowlistError: If no extension is selected.
        """
        return cls(
            directory=validate_directory(directory),
            recursive=recursive,
            dry_run=dry_run,
            extensions=effective_set(extensions),
        )


def describe_error(error: UnblockctlError) -> str:
    """Convert an engine error into one human-readable status line."""
    if isinstance(error, (ValidationError, ToolFailedError)):
        return str(error)
    if isinstance(error, ToolInvocationFailedError):
        return f"Could not run PowerShell: {error}"
    if isinstance(error, ScanResultParseError):
        return f"Failed to parse scan results: {error}"
    return str(error)


def _decline(paths: Sequence[str]) -> bool:
    return False


class Session:
    """Scan/unblock session with a single operation slot.

    Args:
        scanner: Scanner used for every scan.
        operator_factory: Builds an operator for a given dry-run flag.
        log_sink: Receives timestamped status lines.
        confirm: Asked before a committed (non dry-run) unblock. Declines
            by default.
        clock: Time source for log timestamps.
    """

    def __init__(
        self,
        scanner: ZoneScanner,
        operator_factory: OperatorFactory | None = None,
        *,
        log_sink: LogSink | None = None,
        confirm: ConfirmCallback | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._scanner = scanner
        self._operator_factory = operator_factory or (
            lambda dry_run: ZoneOperator(scanner.runner, dry_run=dry_run)
        )
        self._log_sink = log_sink
        self._confirm = confirm or _decline
        self._clock = clock

        self._state = SessionState.IDLE
        self._records: tuple[BlockedFileRecord, ...] = ()
        self._selection: frozenset[str] = frozenset()

    @property
    def state(self) -> SessionState:
        """Current slot state."""
        return self._state

    @property
    def can_start(self) -> bool:
        """Check if scan and unblock triggers are enabled."""
        return self._state == SessionState.IDLE

    @property
    def records(self) -> tuple[BlockedFileRecord, ...]:
        """Current scan result, sorted by path."""
        return self._records

    @property
    def selection(self) -> list[str]:
        """Selected paths, in result order."""
        return [r.full_name for r in self._records if r.full_name in self._selection]

    def log(self, message: str) -> None:
        """Send a timestamped line to the log sink."""
        logger.debug("%s", message)
        if self._log_sink is not None:
            self._log_sink(f"[{self._clock():%H:%M:%S}] {message}")

    def select(self, paths: Iterable[str]) -> list[str]:
        """Replace the selection with the given paths.

        Raises:
            StaleSelectionError: If a path is not in the current result set.
        """
        known = {r.full_name for r in self._records}
        requested = frozenset(paths)
        unknown = sorted(requested - known, key=str.casefold)
        if unknown:
            msg = f"Not in the current scan result: {', '.join(unknown)}"
            raise StaleSelectionError(msg)
        self._selection = requested
        return self.selection

    def select_all(self) -> list[str]:
        """Select every record of the current result set."""
        self._selection = frozenset(r.full_name for r in self._records)
        return self.selection

    def clear_selection(self) -> None:
        """Deselect everything."""
        self._selection = frozenset()

    def _ensure_idle(self, state: SessionState) -> None:
        if self._state != SessionState.IDLE:
            msg = f"Cannot start {state.value}: {self._state.value} in progress"
            raise OperationInProgressError(msg)

    def _acquire(self, state: SessionState) -> None:
        self._ensure_idle(state)
        self._state = state

    async def scan(self, config: SessionConfig) -> tuple[BlockedFileRecord, ...]:
        """Run a scan and replace the result set.

        Raises:
            OperationInProgressError: If another operation is in flight.
            UnblockctlError: Any scan error, after it has been logged.
        """
        self._acquire(SessionState.SCANNING)
        try:
            return await self._run_scan(config)
        finally:
            self._state = SessionState.IDLE

    async def _run_scan(self, config: SessionConfig) -> tuple[BlockedFileRecord, ...]:
        self._records = ()
        self._selection = frozenset()
        self.log("Scanning for blocked files (Mark of the Web / Zone.Identifier) ...")

        try:
            records = await self._scanner.scan(config.directory, config.recursive, config.extensions)
        except UnblockctlError as e:
            self.log(describe_error(e))
            raise

        self._records = tuple(records)
        self._selection = frozenset(r.full_name for r in self._records)
        if self._records:
            self.log(f"Scan complete. Blocked files found: {len(self._records)}")
        else:
            self.log("No blocked files found (within allowlist).")
        return self._records

    async def unblock(self, config: SessionConfig) -> UnblockBatch | None:
        """Unblock the selected files.

        A committed batch must be confirmed first; declining returns None
        without invoking PowerShell. After a successful committed batch the
        session rescans automatically before releasing the slot.

        Returns:
            The batch outcome, or None if the user declined.

        Raises:
            OperationInProgressError: If another operation is in flight.
            NoSelectionError: If nothing is selected.
            UnblockctlError: Any unblock or refresh error, after it has been logged.
        """
        self._ensure_idle(SessionState.UNBLOCKING)

        paths = tuple(self.selection)
        if not paths:
            msg = "Select at least one file to unblock"
            raise NoSelectionError(msg)

        if not config.dry_run and not self._confirm(paths):
            self.log("Unblock cancelled.")
            return None

        self._acquire(SessionState.UNBLOCKING)
        try:
            operator = self._operator_factory(config.dry_run)
            self.log(f"{'Dry run' if config.dry_run else 'Unblocking'} {len(paths)} file(s) ...")
            try:
                batch = await operator.unblock(paths)
            except UnblockctlError as e:
                self.log(describe_error(e))
                raise

            for failure in batch.failed:
                self.log(f"Failed: {failure.path} -> {failure.error}")

            if config.dry_run:
                self.log("Dry run complete (no changes made).")
                return batch

            self.log(f"Unblocked {len(batch.succeeded)} of {len(paths)} file(s).")
            self.log("Unblock complete. Refreshing list ...")
            self._state = SessionState.SCANNING
            await self._run_scan(config)
            return batch
        finally:
            self._state = SessionState.IDLE
