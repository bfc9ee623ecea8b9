"""Operator-facing progress reporting.

Core components describe what they are doing through a Reporter; the CLI
renders those messages on the rich console. Structured logs are emitted
separately through structlog.
"""

from __future__ import annotations

from typing import Protocol


class Reporter(Protocol):
    """Sink for operator-facing messages."""

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def hint(self, message: str) -> None: ...

    def link(self, label: str, url: str) -> None: ...


class NullReporter:
    """Reporter that discards everything."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def hint(self, message: str) -> None:
        pass

    def link(self, label: str, url: str) -> None:
        pass
