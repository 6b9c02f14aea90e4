"""
Await readiness of event-emitting servers.

Some servers report the outcome of ``listen(port)`` only through events: a
``"listening"`` event when the socket is bound, an ``"error"`` event when it
is not. ``promisify_listen`` turns that into an ordinary awaitable that
returns on success and raises on failure.

Manifesto:
    - **Settles once:** whichever event comes first wins; later emissions
      are ignored by an explicit ``settled`` flag
    - **No leaked handlers:** both handlers are removed on either outcome
    - **Cleanup never raises:** a failing ``remove_listener`` is logged

Examples:
    >>> start = promisify_listen(server)
    >>> await start(8080)        # returns once "listening" is emitted

Tags:
    asyncio, events, server, readiness, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from keel.core.logging import get_logger
from keel.core.protocols import ServerLike

logger = get_logger(__name__)

ERROR_EVENT = "error"
LISTENING_EVENT = "listening"


class _ListenAttempt:
    """One ``listen(port)`` call and the two handlers racing to settle it."""

    def __init__(self, server: ServerLike, future: asyncio.Future[None]) -> None:
        self._server = server
        self._future = future
        self.settled = False

    def on_error(self, error: BaseException | None = None, *args: Any) -> None:
        if self.settled:
            return
        self.settled = True
        self.remove_listeners()
        if not self._future.done():
            if not isinstance(error, BaseException):
                error = RuntimeError(f"Server emitted {ERROR_EVENT!r}: {error!r}")
            self._future.set_exception(error)

    def on_listening(self, *args: Any) -> None:
        if self.settled:
            return
        self.settled = True
        self.remove_listeners()
        if not self._future.done():
            self._future.set_result(None)

    def add_listeners(self) -> None:
        self._server.on(ERROR_EVENT, self.on_error)
        self._server.on(LISTENING_EVENT, self.on_listening)

    def remove_listeners(self) -> None:
        for event, handler in ((ERROR_EVENT, self.on_error), (LISTENING_EVENT, self.on_listening)):
            try:
                self._server.remove_listener(event, handler)
            except Exception:
                logger.warning("listener_removal_failed", listener_event=event, exc_info=True)


def promisify_listen(server: ServerLike) -> Callable[[int], Awaitable[None]]:
    """
    Return a coroutine function that calls ``server.listen(port)`` and waits
    for the server to report readiness.

    Usage: ``await promisify_listen(server)(1234)``

    Raises:
        The exception emitted with ``"error"``, or raised by ``listen()``
    """

    async def listen(port: int) -> None:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        attempt = _ListenAttempt(server, future)
        try:
            attempt.add_listeners()
            server.listen(port)
            await future
        finally:
            # Registration or listen() raised, or the caller was cancelled
            # while waiting.
            if not attempt.settled:
                attempt.settled = True
                attempt.remove_listeners()

    return listen


__all__ = ["ERROR_EVENT", "LISTENING_EVENT", "promisify_listen"]
