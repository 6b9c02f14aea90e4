"""
Canonical protocol definitions for keel.

Manifesto:
    The concurrency primitives consume a few outside objects (a server that
    announces readiness through events, a handle that can be cancelled).
    Protocols describe the shape they need without forcing anyone to
    inherit from a keel base class:

    - **Decoupling:** Modules depend on shape, not implementation
    - **Testability:** Any object matching the protocol works, fakes included

Architecture:
    ::

        protocols.py
        ├── EventHandler   : callable registered for one event name
        ├── ServerLike     : on / remove_listener / listen (promisify_listen)
        └── Cancellable    : cancel() (clear_interval handles)

Tags:
    protocol, events, server, cancellation, keel-core, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

EventHandler = Callable[..., Any]


@runtime_checkable
class ServerLike(Protocol):
    """
    An event-emitting object that starts listening on a port.

    ``listen()`` is expected to report its outcome by emitting either
    ``"listening"`` or ``"error"`` (with the exception as the first
    argument) rather than by raising or returning.
    """

    def on(self, event: str, handler: EventHandler) -> Any: ...

    def remove_listener(self, event: str, handler: EventHandler) -> Any: ...

    def listen(self, port: int) -> Any: ...


@runtime_checkable
class Cancellable(Protocol):
    """Anything that can be stopped with a no-argument ``cancel()``."""

    def cancel(self) -> Any: ...


__all__ = ["EventHandler", "ServerLike", "Cancellable"]
