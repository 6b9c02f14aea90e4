"""Shared settings for keel.

Every service embedding keel shares the same handful of knobs (the
anonymous-user sentinel, default identifier length, username bounds, log
presets).  ``KeelSettings`` reads them from ``KEEL_*`` environment variables
and ``.env`` files, validates them once, and ``get_settings()`` caches the
result for the life of the process.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at call time
    - **Environment-driven:** Reads from env vars and .env files
    - **Sensible defaults:** Works out of the box for development

Examples:
    >>> from keel.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.anonymous_username
    'anonymous'

Tags:
    settings, configuration, pydantic, environment, keel-core

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from keel.core.errors import InvalidConfigError


class KeelSettings(BaseSettings):
    """Process-wide keel configuration.

    Fields
    ──────
    anonymous_username       : Sentinel username that is always forbidden
    id_length                : Length printed by `keel id` when --length is omitted
    username_min_length      : Shortest acceptable username
    username_max_length      : Longest acceptable username
    default_timeout_seconds  : Deadline used when callers don't pass one
    log_level / log_format   : Structlog presets
    service_name             : ``service.name`` stamped on every log line
    is_production            : Selects the production logging preset
    """

    model_config = SettingsConfigDict(
        env_prefix="KEEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Identity ─────────────────────────────────────────────────
    anonymous_username: str = Field(default="anonymous", min_length=1)
    id_length: int = Field(default=17)

    # ── Usernames ────────────────────────────────────────────────
    username_min_length: int = Field(default=3, ge=1)
    username_max_length: int = Field(default=30, ge=1)

    # ── Concurrency ──────────────────────────────────────────────
    default_timeout_seconds: float = Field(default=30.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    service_name: str = Field(default="keel")
    is_production: bool = Field(default=False)

    @model_validator(mode="after")
    def _validate_bounds(self) -> KeelSettings:
        if self.id_length < 1:
            raise InvalidConfigError("id_length", self.id_length)
        if self.username_min_length > self.username_max_length:
            raise InvalidConfigError(
                "username_min_length",
                self.username_min_length,
                f"username_min_length ({self.username_min_length}) exceeds "
                f"username_max_length ({self.username_max_length})",
            )
        return self


_settings_cache: dict[str, KeelSettings] = {}


def get_settings(*, _force_reload: bool = False) -> KeelSettings:
    """Load, validate, and cache a :class:`KeelSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = KeelSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (used by tests)."""
    _settings_cache.clear()


__all__ = ["KeelSettings", "get_settings", "clear_settings_cache"]
