"""
Deadline guard for awaitables.

``with_timeout(operation, timeout)`` races an operation against a timer and
settles exactly once, with whichever finishes first.

Manifesto:
    Both outcomes can be queued on the loop before either is processed, so
    "first wins" has to be enforced explicitly rather than assumed:

    - **Single settlement:** a ``settled`` flag is checked and set before
      the result is delivered; the loser is discarded
    - **No leaked timer:** an early result cancels the deadline timer
    - **Verbatim errors:** the operation's own exception is re-raised as is
    - **Typed timeouts:** ``OperationTimeoutError``, never message parsing

Architecture:
    ::

        operation ──done──┐
                          ├──▶ _settle() ──(settled? drop)──▶ result future
        deadline ──fired──┘

Examples:
    >>> value = await with_timeout(fetch_profile(user_id), 2.0)

    >>> try:
    ...     await with_timeout(slow_call(), 0.5, "profile lookup timed out")
    ... except OperationTimeoutError:
    ...     ...

Tags:
    asyncio, timeout, deadline, race, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Generator
from typing import Any, Generic, TypeVar

from keel.core.errors import OperationTimeoutError
from keel.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MESSAGE = "Operation has timed out"


class GuardedOperation(Generic[T]):
    """
    An awaitable wrapping ``operation`` with a deadline of ``timeout`` seconds.

    The operation is scheduled on construction (coroutines are wrapped in a
    task), so the clock starts immediately, not when the guard is awaited.
    """

    def __init__(
        self,
        operation: Awaitable[T],
        timeout: float,
        message: str | None = None,
        *,
        cancel_on_timeout: bool = False,
    ) -> None:
        self._loop = asyncio.get_running_loop()
        self._timeout = timeout
        self._message = message or DEFAULT_TIMEOUT_MESSAGE
        self._cancel_on_timeout = cancel_on_timeout
        self._settled = False
        self._timed_out = False

        self._result: asyncio.Future[T] = self._loop.create_future()
        self._result.add_done_callback(self._on_result_done)

        self._source: asyncio.Future[T] = asyncio.ensure_future(operation)
        self._timer: asyncio.TimerHandle | None = self._loop.call_later(timeout, self._on_deadline)
        self._source.add_done_callback(self._on_source_done)

    @property
    def settled(self) -> bool:
        return self._settled

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    @property
    def timeout(self) -> float:
        return self._timeout

    def _release_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _settle(self, *, result: Any = None, error: BaseException | None = None) -> bool:
        if self._settled:
            return False
        self._settled = True
        self._release_timer()
        # The caller may have cancelled the result future in this same tick,
        # before _on_result_done ran.
        if self._result.done():
            return False
        if error is not None:
            self._result.set_exception(error)
        else:
            self._result.set_result(result)
        return True

    def _on_source_done(self, source: asyncio.Future[T]) -> None:
        if source.cancelled():
            if not self._settled:
                self._settled = True
                self._release_timer()
                self._result.cancel()
            return

        # Always retrieve the outcome so a late failure is not reported as
        # "exception was never retrieved".
        error = source.exception()
        if error is not None:
            if not self._settle(error=error):
                logger.debug("guarded_operation_late_error", error=repr(error))
            return

        if not self._settle(result=source.result()):
            logger.debug("guarded_operation_late_result", timeout=self._timeout)

    def _on_deadline(self) -> None:
        self._timer = None
        error = OperationTimeoutError(self._message).with_context(
            operation="with_timeout", timeout=self._timeout
        )
        if self._settle(error=error):
            self._timed_out = True
            if self._cancel_on_timeout:
                self._source.cancel()

    def _on_result_done(self, result: asyncio.Future[T]) -> None:
        # The awaiting caller was cancelled.
        if result.cancelled() and not self._settled:
            self._settled = True
            self._release_timer()

    def __await__(self) -> Generator[Any, None, T]:
        return self._result.__await__()

    def __repr__(self) -> str:
        if not self._settled:
            state = "pending"
        elif self._timed_out:
            state = "timed_out"
        else:
            state = "settled"
        return f"{self.__class__.__name__}(timeout={self._timeout}, state={state})"


async def delay(seconds: float) -> None:
    """Sleep for ``seconds``; return at once when it is not positive."""
    if seconds > 0:
        await asyncio.sleep(seconds)


def with_timeout(
    operation: Awaitable[T],
    timeout: float | None = None,
    message: str | None = None,
    *,
    cancel_on_timeout: bool = False,
) -> GuardedOperation[T]:
    """
    Wrap ``operation`` with a deadline.

    Args:
        operation: Coroutine, task or future to guard
        timeout: Deadline in seconds; defaults to the configured
            ``default_timeout_seconds``
        message: Message of the ``OperationTimeoutError`` raised on timeout
        cancel_on_timeout: Also cancel the operation when the deadline wins.
            By default the operation keeps running and its late outcome is
            discarded.

    Returns:
        Awaitable resolving to the operation's result

    Raises:
        OperationTimeoutError: the deadline fired first
    """
    if timeout is None:
        from keel.core.settings import get_settings

        timeout = get_settings().default_timeout_seconds
    return GuardedOperation(operation, timeout, message, cancel_on_timeout=cancel_on_timeout)


__all__ = ["DEFAULT_TIMEOUT_MESSAGE", "GuardedOperation", "with_timeout", "delay"]
