"""CLI commands for unblockctl.

This package contains all subcommand implementations.
"""

from unblockctl.cli.commands import allowlist, config, run, scan, unblock

__all__ = ["allowlist", "config", "run", "scan", "unblock"]
