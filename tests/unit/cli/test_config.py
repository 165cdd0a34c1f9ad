"""Unit tests for config commands and global options.

Tests for unblockctl config show/path/set and --version.
"""

from typer.testing import CliRunner
from unblockctl import __version__
from unblockctl.cli.main import app
from unblockctl.core.config import load_config
from unblockctl.core.paths import get_config_path

runner = CliRunner()


class TestGlobalOptions:
    """Tests for top-level options."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"unblockctl version {__version__}" in result.stdout

    def test_help_lists_commands(self) -> None:
        """--help lists every command group."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for name in ("scan", "unblock", "run", "allowlist", "config"):
            assert name in result.stdout


class TestConfigCommands:
    """Tests for unblockctl config commands."""

    def test_path(self) -> None:
        """path prints the config file location."""
        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert result.stdout.strip() == str(get_config_path())

    def test_show_defaults(self) -> None:
        """show lists the effective settings."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "dry_run" in result.stdout
        assert "true" in result.stdout

    def test_set_values(self) -> None:
        """set persists changed defaults only."""
        result = runner.invoke(app, ["config", "set", "--commit", "--recursive"])

        assert result.exit_code == 0
        config = load_config()
        assert config.dry_run is False
        assert config.recursive is True

    def test_set_executable_and_clear(self) -> None:
        """An empty --executable clears the setting."""
        runner.invoke(app, ["config", "set", "--executable", "pwsh"])
        assert load_config().executable == "pwsh"

        runner.invoke(app, ["config", "set", "--executable", ""])
        assert load_config().executable is None

    def test_set_nothing(self) -> None:
        """set without options changes nothing."""
        result = runner.invoke(app, ["config", "set"])

        assert result.exit_code == 0
        assert "Nothing to change." in result.stdout
        assert not get_config_path().exists()
