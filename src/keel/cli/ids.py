"""
CLI: ``keel id`` -- random and deterministic identifiers.
"""

from __future__ import annotations

import typer

from keel.cli.utils import console, err_console, load_settings
from keel.core.errors import ValidationError
from keel.core.ids import deterministic_identifier, random_identifier

app = typer.Typer(no_args_is_help=True)


def _default_length(length: int | None) -> int:
    if length is not None:
        return length
    return load_settings().id_length


@app.command("random")
def random_id(
    length: int | None = typer.Option(None, "--length", "-l", help="Identifier length"),
    count: int = typer.Option(1, "--count", "-n", min=1, help="How many identifiers to print"),
) -> None:
    """Print cryptographically random identifiers, one per line."""
    size = _default_length(length)
    try:
        for _ in range(count):
            console.print(random_identifier(size), highlight=False)
    except ValidationError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e.message}")
        raise typer.Exit(code=1)


@app.command("deterministic")
def deterministic_id(
    key: str = typer.Argument(..., help="Key to derive the identifier from"),
    length: int | None = typer.Option(None, "--length", "-l", help="Identifier length"),
) -> None:
    """Print the identifier derived from KEY (same key, same identifier)."""
    try:
        console.print(deterministic_identifier(key, _default_length(length)), highlight=False)
    except ValidationError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e.message}")
        raise typer.Exit(code=1)
