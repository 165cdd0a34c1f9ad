"""Exception hierarchy for unblockctl.

Validation errors are raised before any external process is spawned.
Tool errors describe a PowerShell invocation that could not run or that
reported failure. Nothing in the engine retries; every error is surfaced
once to the caller.
"""


class UnblockctlError(Exception):
    """Base exception for all unblockctl errors."""


class ValidationError(UnblockctlError):
    """Base exception for precondition failures (no process is spawned)."""


class InvalidExtensionError(ValidationError):
    """Raised when an extension string cannot be normalized."""


class InvalidFolderError(ValidationError):
    """Raised when the target directory does not exist or is not a directory."""


class EmptyAllowlistError(ValidationError):
    """Raised when no extensions are selected for a scan."""


class NoSelectionError(ValidationError):
    """Raised when an unblock is requested for zero files."""


class StaleSelectionError(ValidationError):
    """Raised when a selected path is not part of the current scan result."""


class OperationInProgressError(UnblockctlError):
    """Raised when an operation is started while another one is in flight."""


class ToolInvocationFailedError(UnblockctlError):
    """Raised when the external tool could not be started or its streams read."""


class ToolFailedError(UnblockctlError):
    """Base exception for a tool run that exited with a non-zero status.

    Attributes:
        exit_code: Exit status reported by the external tool.
        stderr: Captured standard error text.
    """

    operation = "Operation"

    def __init__(self, exit_code: int, stderr: str = "") -> None:
        self.exit_code = exit_code
        self.stderr = stderr.strip()
        message = f"{self.operation} failed with exit code {exit_code}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ScanFailedError(ToolFailedError):
    """Raised when the scan script exits with a non-zero status."""

    operation = "Scan"


class UnblockFailedError(ToolFailedError):
    """Raised when the unblock script exits with a non-zero status."""

    operation = "Unblock"


class ScanResultParseError(UnblockctlError):
    """Raised when scan output does not match the expected schema."""


class ConfigError(UnblockctlError):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""
