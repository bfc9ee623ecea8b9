"""Structured logging and OpenTelemetry spans for chainship.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers for pipeline stages and chain calls
- Retry attempt logging used by the RPC client
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "chainship"


def get_logger() -> BoundLogger:
    """Get the package logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for chainship.

    Returns:
        OpenTelemetry Tracer instance (no-op unless an SDK is installed).
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "WARNING",
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for chainship.

    The CLI keeps operator-facing messages on the rich console, so the
    default level only lets warnings and errors through.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    import logging

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        force=True,
    )


@contextmanager
def span(
    name: str,
    *,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
    log_start: bool = True,
    log_end: bool = True,
) -> Iterator[Span]:
    """Create an OpenTelemetry span with structured logging.

    Args:
        name: Span name (e.g., "pipeline.resolve", "chain.get_abi").
        kind: Span kind (INTERNAL, CLIENT, SERVER, PRODUCER, CONSUMER).
        attributes: Optional span attributes.
        log_start: If True, log span start.
        log_end: If True, log span end.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with span("pipeline.resolve", attributes={"source": "./build"}):
        ...     resolver.resolve("./build")
    """
    tracer = get_tracer()
    logger = get_logger()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=kind, attributes=attrs) as s:
        if log_start:
            logger.debug(f"{name}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            if log_end:
                logger.debug(f"{name}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.debug(f"{name}_failed", error=str(exc), **attrs)
            raise


@contextmanager
def chain_call(
    operation: str,
    *,
    endpoint: str | None = None,
    account: str | None = None,
    table: str | None = None,
) -> Iterator[Span]:
    """Create a client span for a chain API call with standard attributes.

    Args:
        operation: API operation (e.g., "get_abi", "get_table_by_scope").
        endpoint: Base URL of the chain API.
        account: Account being queried.
        table: Table being queried.

    Yields:
        OpenTelemetry Span instance.
    """
    attrs: dict[str, Any] = {"chain.operation": operation}
    if endpoint:
        attrs["chain.endpoint"] = endpoint
    if account:
        attrs["chain.account"] = account
    if table:
        attrs["chain.table"] = table

    with span(f"chain.{operation}", kind=SpanKind.CLIENT, attributes=attrs) as s:
        yield s


def log_retry_attempt(
    operation: str,
    attempt: int,
    max_attempts: int,
    wait_seconds: float,
    error: str,
) -> None:
    """Log a retry attempt for observability.

    Args:
        operation: Operation being retried.
        attempt: Current attempt number.
        max_attempts: Maximum attempts configured.
        wait_seconds: Time waiting before retry.
        error: Error message that triggered retry.
    """
    logger = get_logger()
    logger.warning(
        "operation_retry",
        operation=operation,
        attempt=attempt,
        max_attempts=max_attempts,
        wait_seconds=wait_seconds,
        error=error,
    )
