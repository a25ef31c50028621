"""
Fork-join for independent remote calls.

``fork_join`` schedules every awaitable at once and returns only when all of
them have settled. The ``JoinedOutcome`` is all-or-nothing: ``ok`` is true
only if every operation succeeded.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, List, Optional, Tuple


@dataclass(frozen=True)
class JoinedOutcome:
    """Settled results of a fork-join, in the order the operations were given."""

    results: Tuple[Any, ...]
    errors: Tuple[Optional[BaseException], ...]
    # Indices of the operations in the order they settled
    completion_order: Tuple[int, ...] = field(default=())

    @property
    def ok(self) -> bool:
        return all(e is None for e in self.errors)

    def failed(self) -> List[int]:
        return [i for i, e in enumerate(self.errors) if e is not None]

    def first_error(self) -> Optional[BaseException]:
        """The error of the operation that failed first, or None."""
        for i in self.completion_order:
            if self.errors[i] is not None:
                return self.errors[i]
        for e in self.errors:
            if e is not None:
                return e
        return None

    def unwrap(self) -> Tuple[Any, ...]:
        """All results, or raise the first error."""
        error = self.first_error()
        if error is not None:
            raise error
        return self.results


async def fork_join(*operations: Awaitable[Any]) -> JoinedOutcome:
    """
    Run ``operations`` concurrently and wait for every one of them to settle.

    A failure does not cancel the others; the caller decides what a partial
    success means. Cancelling the caller cancels every operation.
    """
    if not operations:
        return JoinedOutcome(results=(), errors=())

    order: List[int] = []
    tasks = []
    for i, op in enumerate(operations):
        task = asyncio.ensure_future(op)
        task.add_done_callback(lambda _t, i=i: order.append(i))
        tasks.append(task)

    settled = await asyncio.gather(*tasks, return_exceptions=True)

    results = []
    errors = []
    for value in settled:
        if isinstance(value, BaseException):
            results.append(None)
            errors.append(value)
        else:
            results.append(value)
            errors.append(None)
    return JoinedOutcome(results=tuple(results), errors=tuple(errors), completion_order=tuple(order))
