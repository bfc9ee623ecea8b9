"""CLI error handling for chainship-cli.

This module provides CLI-specific error handling that wraps
chainship-core exceptions and provides user-friendly messages
with appropriate exit codes.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from chainship_cli.output import error, hint
from chainship_core.errors import ChainConnectionError, ChainshipError
from chainship_core.hints import classify_error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad source, rejected operation)
EXIT_SYSTEM_ERROR = 2  # System error (unreachable node, file system)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
        hint: Optional suggested fix shown below the message.
    """

    def __init__(
        self,
        message: str,
        exit_code: int = EXIT_USER_ERROR,
        *,
        hint: str | None = None,
    ) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
            hint: Suggested fix, if one is known.
        """
        super().__init__(message)
        self.exit_code = exit_code
        self.hint = hint

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())
        if self.hint:
            hint(self.hint)


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - account: String should have at least 1 character"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"]) or "request"
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_chainship_error(err: ChainshipError) -> NoReturn:
    """Convert a fatal chainship error into a CLIError.

    Connection problems exit with the system error code, everything else
    with the user error code. A matching hint is attached.

    Args:
        err: Fatal chainship error.

    Raises:
        CLIError: Always raises with the classified message.
    """
    classified = classify_error(err)
    exit_code = EXIT_SYSTEM_ERROR if isinstance(err, ChainConnectionError) else EXIT_USER_ERROR
    raise CLIError(
        classified.text or err.user_message,
        exit_code=exit_code,
        hint=classified.hint,
    ) from err


def handle_validation_error(err: PydanticValidationError) -> NoReturn:
    """Handle Pydantic validation errors with user-friendly messages.

    Args:
        err: Pydantic ValidationError instance.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(format_pydantic_error(err))


def exit_with_error(message: str, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Exit the CLI with an error message.

    Args:
        message: Error message to display.
        exit_code: Exit code for the CLI.

    Note:
        This function never returns - it always calls sys.exit().
    """
    error(message)
    sys.exit(exit_code)
