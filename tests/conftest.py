"""
Shared pytest fixtures and configuration for keel tests.

This module provides:
- Settings / username-policy cache cleanup for test isolation
- A fake event-emitting server for readiness tests

Usage:
    Fixtures are auto-discovered by pytest. Simply use them as function
    arguments (pytest injects them automatically).
"""

import sys
from collections import defaultdict
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator

import pytest

# Ensure keel package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from keel.core.settings import clear_settings_cache
from keel.core.usernames import get_username_policy


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Cache Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_fixture() -> Generator[None, None, None]:
    """
    Drop cached settings and the shared username policy around each test.

    Tests that set ``KEEL_*`` variables with monkeypatch would otherwise see
    whatever the first test happened to load.
    """
    clear_settings_cache()
    get_username_policy.cache_clear()
    yield
    clear_settings_cache()
    get_username_policy.cache_clear()


# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeServer:
    """
    Minimal event emitter with a ``listen(port)`` that reports via events.

    ``outcome`` selects what ``listen`` emits synchronously: ``"listening"``,
    ``"error"`` or ``None`` (emit nothing; the test emits later).
    """

    def __init__(self, outcome: str | None = "listening", error: BaseException | None = None):
        self.outcome = outcome
        self.error = error or OSError("address already in use")
        self.listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.listen_calls: list[int] = []

    def on(self, event: str, handler: Callable[..., Any]) -> "FakeServer":
        self.listeners[event].append(handler)
        return self

    def remove_listener(self, event: str, handler: Callable[..., Any]) -> "FakeServer":
        handlers = self.listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
        return self

    def emit(self, event: str, *args: Any) -> bool:
        handlers = list(self.listeners.get(event, []))
        for handler in handlers:
            handler(*args)
        return bool(handlers)

    def listen(self, port: int) -> None:
        self.listen_calls.append(port)
        if self.outcome == "listening":
            self.emit("listening")
        elif self.outcome == "error":
            self.emit("error", self.error)

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self.listeners.get(event, []))
        return sum(len(handlers) for handlers in self.listeners.values())


@pytest.fixture
def make_server():
    """
    Factory fixture for creating FakeServer instances.

    Usage:
        def test_something(make_server):
            server = make_server("error")
    """

    def _make_server(outcome: str | None = "listening", error: BaseException | None = None) -> FakeServer:
        return FakeServer(outcome=outcome, error=error)

    return _make_server
