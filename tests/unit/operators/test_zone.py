"""Unit tests for ZoneOperator.

Tests for the unblock script builder, the status line parser and the operator.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from unblockctl.core.errors import NoSelectionError, ToolInvocationFailedError, UnblockFailedError
from unblockctl.models.outcome import OperationOutcome
from unblockctl.operators.zone import ZoneOperator, build_unblock_script, parse_unblock_output

PATHS = ["C:\\dl\\a.pdf", "C:\\dl\\B.pdf"]


class TestBuildUnblockScript:
    """Tests for build_unblock_script function."""

    def test_dry_run_uses_whatif(self) -> None:
        """Dry runs switch -WhatIf on."""
        script = build_unblock_script(PATHS, dry_run=True)

        assert "$whatIf = $true" in script
        assert "-WhatIf:$whatIf" in script
        assert "Unblock-File -LiteralPath $p" in script

    def test_commit_disables_whatif(self) -> None:
        """Committed runs switch -WhatIf off."""
        assert "$whatIf = $false" in build_unblock_script(PATHS, dry_run=False)

    def test_paths_are_quoted(self) -> None:
        """Paths with quotes are embedded safely."""
        script = build_unblock_script(["C:\\it's.pdf"], dry_run=True)

        assert "$paths = @('C:\\it''s.pdf')" in script


class TestParseUnblockOutput:
    """Tests for parse_unblock_output function."""

    def test_all_ok(self, mock_unblock_ok: str) -> None:
        """OK lines map to successes; WhatIf notices are ignored."""
        results = parse_unblock_output(mock_unblock_ok, PATHS, dry_run=True)

        assert [r.path for r in results] == PATHS
        assert all(r.success and r.dry_run for r in results)

    def test_failure_line(self) -> None:
        """FAIL lines carry the error message."""
        stdout = "OK\tC:\\dl\\a.pdf\r\nFAIL\tC:\\dl\\B.pdf\tAccess to the path is denied.\r\n"

        results = parse_unblock_output(stdout, PATHS, dry_run=False)

        assert results[0].success is True
        assert results[1].failed is True
        assert results[1].error == "Access to the path is denied."

    def test_failure_without_message(self) -> None:
        """A FAIL line without text gets a generic error."""
        results = parse_unblock_output("FAIL\tC:\\dl\\a.pdf\n", PATHS[:1], dry_run=False)

        assert results[0].error == "Unknown error"

    def test_missing_path_reported_failed(self) -> None:
        """A path without a status line is a failure."""
        results = parse_unblock_output("OK\tC:\\dl\\a.pdf\n", PATHS, dry_run=False)

        assert results[1].failed is True
        assert results[1].error == "No result reported"

    def test_request_order_kept(self) -> None:
        """Results follow request order, not output order."""
        stdout = "OK\tC:\\dl\\B.pdf\nOK\tC:\\dl\\a.pdf\n"

        results = parse_unblock_output(stdout, PATHS, dry_run=False)

        assert [r.path for r in results] == PATHS


class TestZoneOperator:
    """Tests for ZoneOperator class."""

    @pytest.fixture
    def runner(self) -> MagicMock:
        """Mock PowerShell runner."""
        mock = MagicMock()
        mock.invoke = AsyncMock()
        return mock

    def test_dry_run_property(self, runner: MagicMock) -> None:
        """dry_run reflects the constructor flag."""
        assert ZoneOperator(runner, dry_run=True).dry_run is True
        assert ZoneOperator(runner).dry_run is False

    def test_is_available(self, runner: MagicMock) -> None:
        """Availability is delegated to the runner."""
        runner.is_available.return_value = False

        assert ZoneOperator(runner).is_available() is False

    def test_dry_run_batch(self, runner: MagicMock, mock_unblock_ok: str) -> None:
        """A dry run reports every path as would-be unblocked."""
        runner.invoke.return_value = OperationOutcome(0, mock_unblock_ok, "")

        batch = asyncio.run(ZoneOperator(runner, dry_run=True).unblock(PATHS))

        assert batch.dry_run is True
        assert batch.succeeded == PATHS
        assert batch.failed == []
        assert "$whatIf = $true" in runner.invoke.await_args.args[0]

    def test_partial_failure(self, runner: MagicMock) -> None:
        """One failed path does not stop the others."""
        stdout = "FAIL\tC:\\dl\\a.pdf\tFile is in use\nOK\tC:\\dl\\B.pdf\n"
        runner.invoke.return_value = OperationOutcome(0, stdout, "Failed: C:\\dl\\a.pdf -> ...")

        batch = asyncio.run(ZoneOperator(runner).unblock(PATHS))

        assert batch.succeeded == ["C:\\dl\\B.pdf"]
        assert [r.error for r in batch.failed] == ["File is in use"]
        assert batch.outcome.stderr.startswith("Failed:")

    def test_empty_paths_raises_without_invoking(self, runner: MagicMock) -> None:
        """An empty batch raises and spawns nothing."""
        with pytest.raises(NoSelectionError):
            asyncio.run(ZoneOperator(runner).unblock([]))

        runner.invoke.assert_not_called()

    def test_nonzero_exit_raises(self, runner: MagicMock) -> None:
        """A failing script raises UnblockFailedError."""
        runner.invoke.return_value = OperationOutcome(2, "", "parser error")

        with pytest.raises(UnblockFailedError, match="Unblock failed with exit code 2"):
            asyncio.run(ZoneOperator(runner).unblock(PATHS))

    def test_invocation_error_propagates(self, runner: MagicMock) -> None:
        """A PowerShell that cannot start surfaces as ToolInvocationFailedError."""
        runner.invoke.side_effect = ToolInvocationFailedError("gone")

        with pytest.raises(ToolInvocationFailedError):
            asyncio.run(ZoneOperator(runner).unblock(PATHS))
