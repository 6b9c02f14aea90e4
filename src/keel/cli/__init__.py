"""
CLI layer for keel.

Provides a Typer application whose sub-commands delegate to ``keel.core``.
All logic lives in core -- this package handles only terminal transport:
argument parsing, coloured output, and exit codes.

Entry point::

    keel --help
"""

from keel.cli.app import app

__all__ = ["app"]
