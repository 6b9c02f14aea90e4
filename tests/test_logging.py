"""
Tests for the logging module.

Tests verify:
- Service metadata and ECS field renaming processors
- Context binding (bind/unbind/clear, LogContext sync and async)
- configure_logging processor chain for JSON and console output
- Environment and settings presets
"""

import logging
from unittest.mock import patch

import pytest
import structlog

from keel.core.logging import (
    LogContext,
    _add_service_metadata,
    _elasticsearch_compatible,
    bind_context,
    clear_context,
    configure_for_environment,
    configure_from_settings,
    configure_logging,
    get_logger,
    unbind_context,
)
from keel.core.settings import KeelSettings


@pytest.fixture(autouse=True)
def reset_structlog():
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()


class TestProcessors:
    def test_service_metadata_added(self):
        configure_logging(service="billing", json_format=True)
        event = _add_service_metadata(None, "info", {"event": "x"})
        assert event["service.name"] == "billing"

    def test_service_metadata_not_overwritten(self):
        event = _add_service_metadata(None, "info", {"event": "x", "service.name": "explicit"})
        assert event["service.name"] == "explicit"

    def test_elasticsearch_field_names(self):
        event = _elasticsearch_compatible(
            None, "info", {"event": "x", "timestamp": "2024-01-01T00:00:00Z", "level": "info"}
        )
        assert event == {"event": "x", "@timestamp": "2024-01-01T00:00:00Z", "log.level": "info"}


class TestContextManagement:
    def test_bind_and_unbind(self):
        bind_context(task="refresh", request_id="abc")
        assert structlog.contextvars.get_contextvars() == {"task": "refresh", "request_id": "abc"}

        unbind_context("request_id")
        assert structlog.contextvars.get_contextvars() == {"task": "refresh"}

    def test_clear(self):
        bind_context(task="refresh")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scoped(self):
        bind_context(service_run="1")
        with LogContext(task="poller") as ctx:
            assert isinstance(ctx, LogContext)
            assert structlog.contextvars.get_contextvars()["task"] == "poller"

        assert structlog.contextvars.get_contextvars() == {"service_run": "1"}

    @pytest.mark.asyncio
    async def test_log_context_async(self):
        async with LogContext(task="poller"):
            assert structlog.contextvars.get_contextvars() == {"task": "poller"}
        assert structlog.contextvars.get_contextvars() == {}


class TestConfigureLogging:
    def test_json_chain(self):
        with patch("keel.core.logging.structlog.configure") as configure:
            configure_logging(level="WARNING", json_format=True)

        processors = configure.call_args.kwargs["processors"]
        assert isinstance(processors[0], structlog.processors.TimeStamper)
        assert _elasticsearch_compatible in processors
        assert structlog.processors.format_exc_info in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_chain(self):
        with patch("keel.core.logging.structlog.configure") as configure:
            configure_logging(level="DEBUG", json_format=False, add_timestamp=False)

        processors = configure.call_args.kwargs["processors"]
        assert not any(isinstance(p, structlog.processors.TimeStamper) for p in processors)
        assert _elasticsearch_compatible not in processors
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_level_filters(self):
        configure_logging(level="WARNING", json_format=True)
        bound = get_logger("keel.test").bind()
        assert bound.is_enabled_for(logging.WARNING)
        assert not bound.is_enabled_for(logging.INFO)

    def test_invalid_level_raises(self):
        with pytest.raises(AttributeError):
            configure_logging(level="LOUD")


class TestPresets:
    def test_production(self):
        with patch("keel.core.logging.configure_logging") as configure:
            configure_for_environment(is_production=True, service="api")
        configure.assert_called_once_with(level="INFO", json_format=True, service="api")

    def test_development(self):
        with patch("keel.core.logging.configure_logging") as configure:
            configure_for_environment()
        configure.assert_called_once_with(level="DEBUG", json_format=False, service="keel")

    def test_from_settings(self):
        settings = KeelSettings(log_level="ERROR", log_format="console", service_name="worker")
        with patch("keel.core.logging.configure_logging") as configure:
            configure_from_settings(settings)
        configure.assert_called_once_with(level="ERROR", json_format=False, service="worker")

    def test_from_settings_production_wins(self):
        settings = KeelSettings(is_production=True, log_level="ERROR", service_name="worker")
        with patch("keel.core.logging.configure_for_environment") as preset:
            configure_from_settings(settings)
        preset.assert_called_once_with(is_production=True, service="worker")

    def test_from_cached_settings(self, monkeypatch):
        monkeypatch.setenv("KEEL_LOG_LEVEL", "WARNING")
        with patch("keel.core.logging.configure_logging") as configure:
            configure_from_settings()
        assert configure.call_args.kwargs["level"] == "WARNING"
