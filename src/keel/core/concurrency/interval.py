"""
Self-rescheduling repeating task for asyncio.

Similar to ``setInterval`` but with two important differences: the work is
asynchronous and the next run is only scheduled AFTER the previous run has
finished, and the first run starts immediately instead of after one delay.

Manifesto:
    A plain "every N seconds" timer overlaps runs as soon as one run takes
    longer than the period. ``RepeatingTask`` never overlaps:

    - **Serial runs:** run N+1 is not started before run N completes
    - **Delay between runs:** measured from the end of a run
    - **One timer at most:** a handle never holds two pending timers
    - **Safe cancellation:** ``cancel()`` is idempotent and never raises

Architecture:
    ::

        start(work, delay)
            │  work() called immediately
            ▼
        ┌────────────────┐  run finished, Active?  ┌─────────────────┐
        │  await run     │ ──────────────────────▶ │ wait `delay`    │
        └────────────────┘                         │ (cancellable)   │
                ▲                                  └────────┬────────┘
                │            timer fired, Active?           │
                └───────────────────────────────────────────┘

        cancel(): Active → Cancelled (terminal), pending timer released.
        An in-flight run is left to finish; nothing is scheduled after it.

Examples:
    >>> async def refresh():
    ...     await cache.refresh()
    >>> task = set_interval(refresh, 30.0)
    >>> ...
    >>> clear_interval(task)

Guardrails:
    ❌ DON'T: Rely on the loop to stop after a failed run
    ✅ DO: Handle errors in ``work`` (or cancel from inside it) when a failure
       must end the loop; failed runs are logged and rescheduled

Tags:
    asyncio, scheduling, interval, timers, cancellation, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from keel.core.errors import SchedulingError
from keel.core.logging import get_logger
from keel.core.protocols import Cancellable

logger = get_logger(__name__)

WorkFunction = Callable[[], Awaitable[Any] | Any]


def _runner_cancelling() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class RepeatingTask:
    """
    Handle for one repeating loop.

    Create it with :meth:`start` (or :func:`set_interval`) from inside a
    running event loop. The handle owns the liveness flag and the pending
    timer; both are only touched from the loop thread.
    """

    def __init__(
        self,
        work: WorkFunction,
        delay: float,
        *,
        name: str | None = None,
    ) -> None:
        if delay < 0:
            raise SchedulingError(f"Interval delay must not be negative, got {delay}")
        self._work = work
        self._delay = delay
        self._name = name or getattr(work, "__qualname__", repr(work))
        self._loop = asyncio.get_running_loop()
        self._active = True
        self._timer: asyncio.TimerHandle | None = None
        self._wakeup: asyncio.Future[None] | None = None
        self._runner: asyncio.Task[None] | None = None
        self._run_count = 0
        self._last_run_at: datetime | None = None

    @classmethod
    def start(cls, work: WorkFunction, delay: float, *, name: str | None = None) -> RepeatingTask:
        """Invoke ``work`` now and keep invoking it ``delay`` seconds after each run ends."""
        task = cls(work, delay, name=name)
        try:
            first_run = task._invoke()
        except (Exception, asyncio.CancelledError):
            logger.exception("repeating_task_run_failed", task=task._name, run=task._run_count)
            first_run = None
        task._runner = task._loop.create_task(task._run_loop(first_run), name=f"repeating:{task._name}")
        return task

    # ── state ────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        return self._name

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def run_count(self) -> int:
        """Number of times ``work`` has been invoked."""
        return self._run_count

    @property
    def last_run_at(self) -> datetime | None:
        return self._last_run_at

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    # ── loop ─────────────────────────────────────────────────────

    def _invoke(self) -> Any:
        self._run_count += 1
        self._last_run_at = datetime.now(UTC)
        return self._work()

    async def _await_run(self, outcome: Any) -> None:
        try:
            if inspect.isawaitable(outcome):
                await outcome
        except asyncio.CancelledError:
            # Only a cancellation of the loop itself ends it; one raised by
            # the run counts as a failed run.
            if _runner_cancelling():
                raise
            logger.exception("repeating_task_run_failed", task=self._name, run=self._run_count)
        except Exception:
            logger.exception("repeating_task_run_failed", task=self._name, run=self._run_count)

    async def _run_loop(self, first_run: Any) -> None:
        try:
            await self._await_run(first_run)
            while self._active:
                await self._sleep()
                if not self._active:
                    break
                try:
                    outcome = self._invoke()
                except (Exception, asyncio.CancelledError):
                    logger.exception("repeating_task_run_failed", task=self._name, run=self._run_count)
                    continue
                await self._await_run(outcome)
        finally:
            self._active = False
        logger.debug("repeating_task_stopped", task=self._name, runs=self._run_count)

    async def _sleep(self) -> None:
        self._wakeup = self._loop.create_future()
        self._timer = self._loop.call_later(self._delay, self._wake)
        try:
            await self._wakeup
        finally:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._wakeup = None

    def _wake(self) -> None:
        self._timer = None
        if self._wakeup is not None and not self._wakeup.done():
            self._wakeup.set_result(None)

    # ── control ──────────────────────────────────────────────────

    def cancel(self) -> None:
        """
        Stop the loop. Idempotent.

        Releases the pending timer if there is one; when called mid-run
        there is none, and the loop simply exits once the run finishes.
        """
        self._active = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._wake()

    async def wait(self) -> None:
        """Wait until the loop has exited (after :meth:`cancel`)."""
        if self._runner is not None:
            await asyncio.shield(self._runner)

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"{self.__class__.__name__}(name={self._name!r}, delay={self._delay}, state={state})"


def set_interval(work: WorkFunction, delay: float, *, name: str | None = None) -> RepeatingTask:
    """Start a :class:`RepeatingTask`; the first run happens immediately."""
    return RepeatingTask.start(work, delay, name=name)


def clear_interval(handle: Cancellable | None) -> None:
    """
    Cancel a handle returned by :func:`set_interval`.

    ``None`` and objects without a ``cancel`` method are ignored. If
    ``cancel()`` itself raises, the error is logged, not raised.
    """
    if not isinstance(handle, Cancellable) or not callable(handle.cancel):
        return
    try:
        handle.cancel()
    except Exception:
        logger.exception("clear_interval_failed", handle=repr(handle))


__all__ = ["RepeatingTask", "WorkFunction", "set_interval", "clear_interval"]
