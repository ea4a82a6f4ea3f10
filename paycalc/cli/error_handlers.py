"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click

from paycalc.cli.utils.formatters import format_error, format_warning


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    exit_code = 1
    label = "Error"

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Invalid environment or .env settings."""

    exit_code = 1
    label = "Configuration Error"


class InputError(CLIError):
    """Unreadable input file or bad command-line value."""

    exit_code = 2
    label = "Input Error"


class DataValidationError(CLIError):
    """Validation found errors in the timesheet data."""

    exit_code = 3
    label = "Data Validation Error"


class ProcessingError(CLIError):
    """Failure while building a report."""

    exit_code = 4
    label = "Processing Error"


def handle_cli_error(error: BaseException, debug: bool = False) -> int:
    """
    Report an error to the user and pick the exit code.

    Args:
        error: The exception that occurred
        debug: Whether to show the full stack trace

    Returns:
        Exit code: 1-4 for CLIError subclasses, 130 for cancellation,
        255 for anything unexpected
    """
    if isinstance(error, CLIError):
        click.echo(format_error(f"{error.label}: {error.message}"))
        if error.recovery_hint:
            click.echo(format_warning(f"Hint: {error.recovery_hint}"))
        return error.exit_code

    if isinstance(error, (click.Abort, KeyboardInterrupt)):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo(
            "".join(traceback.format_exception(type(error), error, error.__traceback__))
        )
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return 255


class ErrorHandler:
    """Context manager turning exceptions into an error message and exit code."""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None or isinstance(exc_val, (SystemExit, click.exceptions.Exit)):
            return False
        sys.exit(handle_cli_error(exc_val, self.debug))


def with_error_handling(debug: bool = False) -> ErrorHandler:
    """
    Wrap a command body with standardized error handling.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.pass_context
        def my_command(ctx):
            with with_error_handling(ctx.obj["debug"]):
                # Command implementation
                pass
    """
    return ErrorHandler(debug)
