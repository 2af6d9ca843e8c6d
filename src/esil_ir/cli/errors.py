"""
CLI Error Handling
==================

Provides consistent error handling and exit codes for the CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from esil_ir.errors import ConfigurationError, EsilError


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    TRANSLATION_ERROR = 1  # An expression failed to translate
    INVALID_ARGS = 2       # Invalid arguments, configuration or missing files
    INTERNAL_ERROR = 3     # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, ConfigurationError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, EsilError):
        # Translation errors already carry an "error:" prefix
        click.echo(str(error), err=True)
        sys.exit(ExitCode.TRANSLATION_ERROR)

    elif isinstance(error, (FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
