"""
Concurrent fan-out that preserves input order and fails fast.
"""

from __future__ import annotations
import asyncio
from typing import Awaitable, Iterable, List, TypeVar

T = TypeVar("T")


async def gather_ordered(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """
    Run awaitables concurrently and return their results in input order.

    As soon as one of them raises, the ones still running are cancelled and
    the exception is raised.

    Args:
        awaitables: Coroutines or futures to run

    Returns:
        Results in the order the awaitables were given
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.wait(pending)

    # Retrieve every exception so none is reported as unhandled
    errors = [
        task.exception() for task in tasks
        if not task.cancelled() and task.exception() is not None
    ]
    if errors:
        raise errors[0]

    return [task.result() for task in tasks]


__all__ = ["gather_ordered"]
