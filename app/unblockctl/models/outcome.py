"""Outcome models for external tool invocations and unblock batches."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """Result of one external tool invocation.

    Attributes:
        returncode: Exit status of the process.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Check if the tool ran to completion."""
        return self.returncode == 0


@dataclass(frozen=True, slots=True)
class UnblockResult:
    """Result of unblocking a single path within a batch.

    Attributes:
        path: Path that was operated on.
        success: Whether the marker was removed (or would be, in a dry run).
        error: Diagnostic text if the path failed, None otherwise.
        dry_run: Whether this was a simulation.
    """

    path: str
    success: bool
    error: str | None = None
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        """Check if this path failed."""
        return not self.success


@dataclass(frozen=True, slots=True)
class UnblockBatch:
    """Outcome of one unblock invocation.

    Attributes:
        outcome: Raw tool outcome (exit status and captured streams).
        results: Per-path results, in request order.
        dry_run: Whether the batch was a simulation.
    """

    outcome: OperationOutcome
    results: tuple[UnblockResult, ...]
    dry_run: bool

    @property
    def succeeded(self) -> list[str]:
        """Paths that were unblocked (or would be)."""
        return [r.path for r in self.results if r.success]

    @property
    def failed(self) -> list[UnblockResult]:
        """Per-path failures."""
        return [r for r in self.results if r.failed]
