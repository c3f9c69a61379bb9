"""Utility modules for oper.

This module exports commonly used utility functions.
"""

from oper.utils.formatting import (
    console,
    err_console,
    pluralize,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from oper.utils.shell import CommandResult, command_exists, run_command, spawn_detached

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "pluralize",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "spawn_detached",
]
