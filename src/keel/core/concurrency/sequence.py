"""
Run awaitables strictly one at a time.

Tags:
    asyncio, sequential, ordering, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar, Union

T = TypeVar("T")

SequenceItem = Union[Awaitable[T], Callable[[], Awaitable[T]]]


async def run_sequentially(items: Iterable[SequenceItem[T]]) -> list[T]:
    """
    Await ``items`` in order and return their results in the same order.

    Each item is either an awaitable or a zero-argument factory returning
    one; factories are only called once the previous item has finished,
    which is what keeps their work from overlapping. Passing already-running
    tasks gives ordered *collection* but not sequential *execution*.

    The first failure propagates unchanged and the remaining items are never
    started; results gathered so far are discarded. Coroutine objects that
    were never reached are closed so they don't warn about never being
    awaited.

    Example:
        >>> results = await run_sequentially(
        ...     [functools.partial(upload, part) for part in parts]
        ... )
    """
    pending = list(items)
    if not pending:
        return []

    results: list[T] = []
    for index, item in enumerate(pending):
        try:
            if callable(item) and not inspect.isawaitable(item):
                item = item()
            results.append(await item if inspect.isawaitable(item) else item)
        except BaseException:
            _close_unstarted(pending[index + 1:])
            raise

    return results


def _close_unstarted(items: list[Any]) -> None:
    for item in items:
        if inspect.iscoroutine(item):
            item.close()


__all__ = ["SequenceItem", "run_sequentially"]
