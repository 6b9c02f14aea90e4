"""
Root Typer application for the keel CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="keel",
    help="keel: identifier generation and username checks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("keel-core")
        except PackageNotFoundError:
            from keel import __version__ as v
        typer.echo(f"keel-core {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """keel CLI: generate identifiers and check usernames."""


# ── Sub-command registration ─────────────────────────────────────────────

from keel.cli.config import app as config_app  # noqa: E402
from keel.cli.ids import app as ids_app  # noqa: E402
from keel.cli.usernames import app as usernames_app  # noqa: E402

app.add_typer(ids_app, name="id", help="Identifier generation.")
app.add_typer(usernames_app, name="username", help="Username checks.")
app.add_typer(config_app, name="config", help="Configuration inspection.")
