"""
Keel - shared runtime utilities for backend services.

- keel.core: identifiers, username policy, asyncio primitives
- keel.cli: ``keel`` command-line tool
"""

__version__ = "0.1.0"

from keel.core import *  # noqa
