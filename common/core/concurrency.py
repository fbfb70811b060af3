"""
Fan-out helpers for I/O-bound batches.

Every task is awaited to completion before the caller decides what to do with
the failures, so one slow or failing task never drops its siblings.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class TaskOutcome(Generic[T]):
    """Result-or-error of a single settled task."""

    key: Any
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


async def settle_all(
    keyed_tasks: Iterable[tuple[Any, Awaitable[T]]],
) -> List[TaskOutcome[T]]:
    """
    Run every awaitable concurrently and wait for all of them.

    Args:
        keyed_tasks: (key, awaitable) pairs; the key identifies the task in the outcome

    Returns:
        One TaskOutcome per task, in submission order
    """
    pairs = list(keyed_tasks)
    if not pairs:
        return []

    results = await asyncio.gather(
        *[awaitable for _, awaitable in pairs], return_exceptions=True
    )

    outcomes: List[TaskOutcome[T]] = []
    for (key, _), result in zip(pairs, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            outcomes.append(TaskOutcome(key=key, error=result))
        else:
            outcomes.append(TaskOutcome(key=key, value=result))
    return outcomes


def failures(outcomes: List[TaskOutcome[T]]) -> List[TaskOutcome[T]]:
    """Return only the failed outcomes."""
    return [outcome for outcome in outcomes if outcome.failed]
