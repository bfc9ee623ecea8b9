"""Retry policies for chain API reads, built on tenacity.

Only idempotent reads are retried. Transaction submissions go through the
signer exactly once per operation.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from chainship_core.config import RetryConfig
from chainship_core.errors import ChainConnectionError
from chainship_core.observability import log_retry_attempt

P = ParamSpec("P")
R = TypeVar("R")

# Default exceptions that trigger retry
DEFAULT_RETRY_EXCEPTIONS: tuple[type[Exception], ...] = (
    ChainConnectionError,
    ConnectionError,
    TimeoutError,
)


def create_retry_decorator(
    config: RetryConfig,
    *,
    retry_exceptions: tuple[type[Exception], ...] | None = None,
    operation_name: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Create a retry decorator with the specified configuration.

    After the last attempt the original exception is re-raised, not
    tenacity's RetryError.

    Args:
        config: RetryConfig with retry policy settings.
        retry_exceptions: Exception types that trigger retry.
            Defaults to connection-related exceptions.
        operation_name: Name for logging purposes.

    Returns:
        Decorator function that adds retry behavior.

    Example:
        >>> @create_retry_decorator(RetryConfig(max_attempts=3), operation_name="get_abi")
        ... def get_abi(account: str) -> dict:
        ...     return post("/v1/chain/get_abi", {"account_name": account})
    """
    exceptions = retry_exceptions or DEFAULT_RETRY_EXCEPTIONS

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        op_name = operation_name or func.__name__

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            last_exception: Exception | None = None

            try:
                for attempt_state in Retrying(
                    retry=retry_if_exception_type(exceptions),
                    stop=stop_after_attempt(config.max_attempts),
                    wait=wait_exponential_jitter(
                        initial=config.initial_wait_seconds,
                        max=config.max_wait_seconds,
                        jitter=config.jitter_seconds,
                    ),
                    reraise=False,
                ):
                    with attempt_state:
                        attempt = attempt_state.retry_state.attempt_number
                        try:
                            return func(*args, **kwargs)
                        except exceptions as exc:
                            last_exception = exc
                            if attempt < config.max_attempts:
                                log_retry_attempt(
                                    operation=op_name,
                                    attempt=attempt,
                                    max_attempts=config.max_attempts,
                                    wait_seconds=_calculate_wait_time(config, attempt),
                                    error=str(exc),
                                )
                            raise
            except RetryError:
                if last_exception is not None:
                    raise last_exception from None
                raise

            raise RuntimeError("Unexpected retry state")  # pragma: no cover

        return wrapper

    return decorator


def _calculate_wait_time(config: RetryConfig, attempt: int) -> float:
    """Calculate wait time for a given attempt.

    Uses exponential backoff: initial * 2^(attempt-1) + jitter

    Args:
        config: Retry configuration.
        attempt: Current attempt number (1-based).

    Returns:
        Wait time in seconds.
    """
    base_wait = config.initial_wait_seconds * (2 ** (attempt - 1))
    jitter = random.uniform(0, config.jitter_seconds)  # noqa: S311
    return min(base_wait + jitter, config.max_wait_seconds)
