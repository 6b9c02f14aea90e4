"""
CLI utility helpers -- output formatting and settings loading.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from keel.core.errors import ConfigError
from keel.core.settings import KeelSettings, get_settings

console = Console()
err_console = Console(stderr=True)


def print_json(payload: Any) -> None:
    """Render ``payload`` as pretty JSON on stdout."""
    console.print_json(json.dumps(payload, default=str))


def load_settings() -> KeelSettings:
    """Load settings, or print a configuration error and exit with code 1.

    Covers both cross-field checks (``ConfigError``) and per-field
    constraints and types rejected by pydantic.
    """
    try:
        return get_settings()
    except ConfigError as e:
        message = e.message
    except PydanticValidationError as e:
        message = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
    err_console.print(f"[red]Configuration Error:[/red] {message}")
    raise typer.Exit(code=1)
