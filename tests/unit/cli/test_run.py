"""Unit tests for run command.

Tests for the full scan, unblock and refresh session from the CLI.
"""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner
from unblockctl.cli.commands.run import resolve_selection
from unblockctl.cli.main import app
from unblockctl.models.blocked_file import BlockedFileRecord
from unblockctl.models.outcome import OperationOutcome

runner = CliRunner()

A, B, C = "C:\\dl\\a.pdf", "C:\\dl\\B.pdf", "C:\\dl\\c.docx"


def _runner_with(*outcomes: OperationOutcome) -> MagicMock:
    """Create a mock PowerShell runner returning the given outcomes in order."""
    mock = MagicMock()
    mock.invoke = AsyncMock(side_effect=list(outcomes))
    return mock


def _records() -> list[BlockedFileRecord]:
    return [
        BlockedFileRecord(full_name=A, name="a.pdf", ext=".pdf"),
        BlockedFileRecord(full_name=B, name="B.pdf", ext=".pdf"),
        BlockedFileRecord(full_name=C, name="c.docx", ext=".docx"),
    ]


class TestResolveSelection:
    """Tests for resolve_selection function."""

    def test_everything_by_default(self) -> None:
        """No filters selects every record."""
        assert resolve_selection(_records(), [], []) == [A, B, C]

    def test_include_by_name(self) -> None:
        """--include narrows the selection, case-insensitively."""
        assert resolve_selection(_records(), ["b.PDF"], []) == [B]

    def test_exclude_by_path(self) -> None:
        """--exclude matches full paths with either separator."""
        assert resolve_selection(_records(), [], ["c:/dl/C.DOCX"]) == [A, B]

    def test_exclude_wins(self) -> None:
        """Exclusions apply after inclusions."""
        assert resolve_selection(_records(), ["a.pdf", "B.pdf"], ["a.pdf"]) == [B]


class TestRunCommand:
    """Tests for unblockctl run command."""

    def test_run_help(self) -> None:
        """Run command shows help."""
        result = runner.invoke(app, ["run", "--help"])

        assert result.exit_code == 0
        assert "Scan a folder and unblock the files found." in result.stdout

    def test_dry_run_session(self, scan_dir: Path, mock_scan_many: str) -> None:
        """A dry run simulates every file and does not rescan."""
        unblock_out = f"OK\t{A}\nOK\t{B}\nOK\t{C}\n"
        mock = _runner_with(
            OperationOutcome(0, mock_scan_many, ""),
            OperationOutcome(0, unblock_out, ""),
        )

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(app, ["run", "--dir", str(scan_dir), "--office"])

        assert result.exit_code == 0
        assert "Dry run: 3 file(s) would be unblocked" in result.stdout
        assert mock.invoke.await_count == 2
        assert "$whatIf = $true" in mock.invoke.await_args_list[1].args[0]

    def test_commit_session_refreshes(
        self, scan_dir: Path, mock_scan_many: str, make_row: Callable[..., dict]
    ) -> None:
        """A committed run unblocks the selection and shows what is left."""
        mock = _runner_with(
            OperationOutcome(0, mock_scan_many, ""),
            OperationOutcome(0, f"OK\t{A}\nOK\t{C}\n", ""),
            OperationOutcome(0, json.dumps(make_row(B, 512)), ""),
        )

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(
                app,
                ["run", "--dir", str(scan_dir), "--office", "--commit", "--yes", "-x", "B.pdf"],
            )

        assert result.exit_code == 0
        assert mock.invoke.await_count == 3
        unblock_script = mock.invoke.await_args_list[1].args[0]
        assert "$whatIf = $false" in unblock_script
        assert "B.pdf" not in unblock_script
        assert "All 2 file(s) unblocked." in result.stdout
        assert "Still Blocked" in result.stdout

    def test_commit_declined(self, scan_dir: Path, mock_scan_single: str) -> None:
        """Declining the prompt leaves the files untouched."""
        mock = _runner_with(OperationOutcome(0, mock_scan_single, ""))

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(app, ["run", "--dir", str(scan_dir), "--commit"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        assert mock.invoke.await_count == 1

    def test_nothing_found(self, scan_dir: Path) -> None:
        """An empty scan ends the run without unblocking."""
        mock = _runner_with(OperationOutcome(0, "", ""))

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(app, ["run", "--dir", str(scan_dir)])

        assert result.exit_code == 0
        assert "No blocked files found" in result.stdout
        assert mock.invoke.await_count == 1

    def test_empty_selection(self, scan_dir: Path, mock_scan_single: str) -> None:
        """Excluding everything exits with an error before unblocking."""
        mock = _runner_with(OperationOutcome(0, mock_scan_single, ""))

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(app, ["run", "--dir", str(scan_dir), "-x", "a.pdf"])

        assert result.exit_code == 1
        assert "Select at least one file" in result.output
        assert mock.invoke.await_count == 1

    def test_per_path_failure(self, scan_dir: Path, mock_scan_single: str) -> None:
        """A failed path yields exit code 1."""
        mock = _runner_with(
            OperationOutcome(0, mock_scan_single, ""),
            OperationOutcome(0, f"FAIL\t{A}\tAccess denied\n", ""),
        )

        with patch("unblockctl.cli.commands.run.build_runner", return_value=mock):
            result = runner.invoke(app, ["run", "--dir", str(scan_dir)])

        assert result.exit_code == 1
        assert "0 succeeded, 1 failed" in result.output
