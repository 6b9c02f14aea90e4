"""
CLI: ``keel username`` -- username legality checks.
"""

from __future__ import annotations

import typer

from keel.cli.utils import console, load_settings, print_json
from keel.core.errors import ValidationError
from keel.core.usernames import is_forbidden_username, validate_username

app = typer.Typer(no_args_is_help=True)


@app.command("check")
def check_username(
    name: str = typer.Argument(..., help="Username to check"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Check NAME against length, charset and forbidden-pattern rules.

    Exits with code 1 when the username is not allowed.
    """
    load_settings()
    try:
        validate_username(name)
    except ValidationError as e:
        if json_out:
            print_json({"username": name, "allowed": False, "constraint": e.constraint, "reason": e.message})
        else:
            console.print(f"[red]✗[/red] {name!r} is not allowed ({e.constraint}): {e.message}")
        raise typer.Exit(code=1)

    if json_out:
        print_json({"username": name, "allowed": True, "constraint": None, "reason": None})
    else:
        console.print(f"[green]✓[/green] {name!r} is allowed")


@app.command("forbidden")
def forbidden(
    name: str = typer.Argument(..., help="Username to test"),
) -> None:
    """Only test NAME against the forbidden-pattern table (no length/charset rules)."""
    load_settings()
    if is_forbidden_username(name):
        console.print(f"{name!r} is forbidden")
        raise typer.Exit(code=1)
    console.print(f"{name!r} is not forbidden")
