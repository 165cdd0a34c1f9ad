"""Utility modules for unblockctl.

This module exports commonly used utility functions.
"""

from unblockctl.utils.formatting import (
    console,
    create_blocked_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from unblockctl.utils.shell import (
    PowerShellRunner,
    command_exists,
    encode_command,
    quote_array,
    quote_literal,
    run_process,
)

__all__ = [
    "PowerShellRunner",
    "command_exists",
    "console",
    "create_blocked_table",
    "encode_command",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "quote_array",
    "quote_literal",
    "run_process",
]
