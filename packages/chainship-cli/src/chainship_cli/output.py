"""Rich console output utilities for chainship-cli.

This module provides formatted console output with Rich,
supporting colored success/error/warning messages and
respecting NO_COLOR environment variable.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console
from rich.markup import escape

# Rich automatically respects NO_COLOR, but we also support --no-color flag
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Args:
        message: The message to display.
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> success("Download completed")
        ✓ Download completed
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Args:
        message: The error message to display.
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> error('Cannot find a ".wasm file" in ./build')
        ✗ Cannot find a ".wasm file" in ./build
    """
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle.

    Args:
        message: The warning message to display.
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> warning("Checking for existing contract...")
        ⚠ Checking for existing contract...
    """
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message.

    Args:
        message: The message to display.
        **kwargs: Additional arguments passed to console.print().
    """
    console.print(message, **kwargs)


def hint(message: str, **kwargs: Any) -> None:
    """Print a suggested fix for the preceding error.

    Args:
        message: The hint to display.
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> hint("Try buying more RAM for the account before deploying again.")
        Hint: Try buying more RAM for the account before deploying again.
    """
    console.print(f"[cyan]Hint:[/cyan] {message}", **kwargs)


def link(label: str, url: str, **kwargs: Any) -> None:
    """Print a labelled, clickable URL.

    Args:
        label: Text shown before the URL.
        url: Target URL.
        **kwargs: Additional arguments passed to console.print().

    Example:
        >>> link("View TX", "https://explorer.xprnetwork.org/tx/ab12?tab=traces")
        View TX: https://explorer.xprnetwork.org/tx/ab12?tab=traces
    """
    console.print(f"{label}: [link={url}]{escape(url)}[/link]", **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Args:
        data: Dictionary to print as JSON.
        **kwargs: Additional arguments passed to console.print_json().
    """
    import json

    console.print_json(json.dumps(data), **kwargs)


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.

    Note:
        This updates the module-level console instance.
    """
    global console
    console = create_console(no_color=no_color)


class ConsoleReporter:
    """Renders pipeline progress on the console.

    Messages come from the chain and from remote servers, so they are
    escaped before printing.
    """

    def info(self, message: str) -> None:
        info(escape(message))

    def success(self, message: str) -> None:
        success(escape(message))

    def warning(self, message: str) -> None:
        warning(escape(message))

    def error(self, message: str) -> None:
        error(escape(message))

    def hint(self, message: str) -> None:
        hint(escape(message))

    def link(self, label: str, url: str) -> None:
        link(escape(label), url)
