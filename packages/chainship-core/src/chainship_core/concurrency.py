"""Fixed-size concurrent batches with per-slot outcomes.

join_all runs every task to completion on a thread pool and returns one
Outcome per task, in task order. A failing task never cancels its siblings
and never raises out of join_all; callers decide per slot what a failure
means (report it, or fall back to a default).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result slot of one task: either a value or the exception it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        """Return the value, or `default` if the task failed."""
        if self.error is not None:
            return default
        return self.value  # type: ignore[return-value]


def _capture(task: Callable[[], T]) -> Outcome[T]:
    try:
        return Outcome(value=task())
    except Exception as exc:
        return Outcome(error=exc)


def join_all(
    tasks: Sequence[Callable[[], T]],
    *,
    max_workers: int | None = None,
) -> list[Outcome[T]]:
    """Run tasks concurrently and wait for all of them.

    Args:
        tasks: Zero-argument callables.
        max_workers: Thread pool size. Defaults to one thread per task.

    Returns:
        One Outcome per task, in the order the tasks were given.

    Example:
        >>> outcomes = join_all([lambda: 1, lambda: 1 / 0])
        >>> [o.ok for o in outcomes]
        [True, False]
    """
    if not tasks:
        return []

    workers = max_workers or len(tasks)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="chainship") as executor:
        futures = [executor.submit(_capture, task) for task in tasks]
        return [future.result() for future in futures]
