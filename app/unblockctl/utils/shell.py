"""PowerShell execution utilities.

Every script sent to PowerShell is built from a fixed template. Values
embedded into a template go through :func:`quote_literal` (or
:func:`quote_array`, which is built on it); the finished script goes
through :func:`encode_command` to become the top-level command-line
argument. No other string concatenation may reach the command line.
"""

import asyncio
import base64
import contextlib
import logging
import shutil
import sys
from collections.abc import Iterable, Mapping

from unblockctl.core.errors import ToolInvocationFailedError
from unblockctl.models.outcome import OperationOutcome

logger = logging.getLogger(__name__)

# Candidate executables, in preference order (Windows PowerShell, then PowerShell 7)
_POWERSHELL_CANDIDATES: tuple[str, ...] = ("powershell.exe", "powershell", "pwsh.exe", "pwsh")

# Force UTF-8 on the redirected streams regardless of the console code page
_UTF8_PREAMBLE = (
    "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8\n"
    "$OutputEncoding = [System.Text.Encoding]::UTF8\n"
)


def quote_literal(value: str) -> str:
    """Embed a value as a PowerShell single-quoted string literal.

    Single quotes (including the typographic variants PowerShell also
    treats as quote characters) are doubled, so the value can never
    terminate the literal.

    Args:
        value: Untrusted text such as a path or an extension.

    Returns:
        The quoted literal, e.g. ``'C:\\It''s here'``.
    """
    escaped = value
    for quote in ("'", "\u2018", "\u2019", "\u201a", "\u201b"):
        escaped = escaped.replace(quote, quote * 2)
    return f"'{escaped}'"


def quote_array(values: Iterable[str]) -> str:
    """Embed values as a PowerShell array of single-quoted literals.

    Returns:
        Array expression, e.g. ``@('.pdf','.txt')``.
    """
    return "@(" + ",".join(quote_literal(v) for v in values) + ")"


def ps_bool(flag: bool) -> str:
    """Return the PowerShell boolean token for a flag."""
    return "$true" if flag else "$false"


def encode_command(script: str) -> str:
    """Encode a whole script as the top-level ``-EncodedCommand`` argument.

    The result is base64 of the UTF-16LE script text, so its alphabet cannot
    end the argument or inject further commands.

    Args:
        script: Complete PowerShell script.

    Returns:
        Encoded argument value.
    """
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").lstrip("\ufeff")


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a child that is still running and reap it."""
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
    await process.wait()


async def run_process(
    args: list[str],
    *,
    env: Mapping[str, str] | None = None,
) -> OperationOutcome:
    """Run one child process and capture its output.

    Standard output and standard error are drained concurrently and fully
    before the exit status is awaited, so a child that fills either pipe
    buffer can never deadlock against the reader. There is no timeout:
    the call returns when the process exits. If the call is cancelled (for
    example by a caller's timeout) the child is killed and reaped first.

    Args:
        args: Program and arguments.
        env: Full environment for the child. If None, inherits the current one.

    Returns:
        OperationOutcome with exit status and decoded output.

    Raises:
        ToolInvocationFailedError: If the process cannot be started or its
            streams cannot be read.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        msg = f"Failed to start {args[0]}: {e}"
        raise ToolInvocationFailedError(msg) from e

    if process.stdout is None or process.stderr is None:
        await _terminate(process)
        msg = f"Failed to capture output of {args[0]}"
        raise ToolInvocationFailedError(msg)

    try:
        stdout, stderr = await asyncio.gather(process.stdout.read(), process.stderr.read())
        returncode = await process.wait()
    except OSError as e:
        await _terminate(process)
        msg = f"Failed to read output of {args[0]}: {e}"
        raise ToolInvocationFailedError(msg) from e
    except BaseException:
        # Cancelled or timed out by the caller
        await _terminate(process)
        raise

    logger.debug(
        "%s exited with %d (%d bytes stdout, %d bytes stderr)",
        args[0],
        returncode,
        len(stdout),
        len(stderr),
    )
    return OperationOutcome(returncode=returncode, stdout=_decode(stdout), stderr=_decode(stderr))


def find_powershell() -> str | None:
    """Locate a PowerShell executable on PATH.

    Returns:
        Executable path, or None if no PowerShell is installed.
    """
    for candidate in _POWERSHELL_CANDIDATES:
        found = shutil.which(candidate)
        if found:
            return found
    return None


class PowerShellRunner:
    """Runs one PowerShell script per call.

    No process is kept alive between calls.

    Example:
        >>> runner = PowerShellRunner()
        >>> if runner.is_available():
        ...     outcome = asyncio.run(runner.invoke("Write-Output 'hi'"))
    """

    def __init__(self, executable: str | None = None) -> None:
        """Initialize the runner.

        Args:
            executable: PowerShell executable. If None, searched on PATH.
        """
        self._executable = executable

    @property
    def executable(self) -> str | None:
        """Resolved executable, or None if PowerShell is unavailable."""
        if self._executable:
            return shutil.which(self._executable) or self._executable
        return find_powershell()

    def is_available(self) -> bool:
        """Check if PowerShell can be started."""
        if self._executable:
            return command_exists(self._executable)
        return find_powershell() is not None

    def build_args(self, script: str) -> list[str]:
        """Build the full argument vector for a script.

        Raises:
            ToolInvocationFailedError: If no PowerShell executable is found.
        """
        executable = self.executable
        if executable is None:
            msg = "PowerShell is not available on this system"
            raise ToolInvocationFailedError(msg)
        return [
            executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-EncodedCommand",
            encode_command(_UTF8_PREAMBLE + script),
        ]

    async def invoke(self, script: str) -> OperationOutcome:
        """Execute a script and capture its output.

        A non-zero exit status is returned in the outcome, not raised.

        Args:
            script: PowerShell script built from quoted values.

        Returns:
            OperationOutcome of the run.

        Raises:
            ToolInvocationFailedError: If PowerShell cannot be started or read.
        """
        args = self.build_args(script)
        logger.info("Invoking %s (%d-character script)", args[0], len(script))
        return await run_process(args)


def is_windows() -> bool:
    """Check if running on Windows (the only platform with Zone.Identifier streams)."""
    return sys.platform == "win32"
