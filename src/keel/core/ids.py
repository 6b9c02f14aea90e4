"""
Random and deterministic identifier generation.

Two flavors of short opaque keys, both 17 characters by default:

- ``random_identifier()``: drawn from the OS CSPRNG, similar in shape to
  Meteor-style Mongo ObjectIds. Uniqueness is statistical.
- ``deterministic_identifier(key)``: derived from SHA-256 of ``key``, so
  the same key always maps to the same record ID. Two keys can collide only
  through a hash collision or after truncation.

Examples:
    >>> len(random_identifier())
    17
    >>> deterministic_identifier("user:42") == deterministic_identifier("user:42")
    True
    >>> len(deterministic_identifier("user:42", length=8))
    8

Tags:
    identifiers, ids, hashing, secrets, keel-core

Doc-Types:
    - API Reference
"""

import base64
import hashlib
import secrets

from keel.core.errors import ValidationError

ID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DEFAULT_ID_LENGTH = 17

# Characters of standard base64 that are not alphanumeric, and their filler.
_B64_SYMBOLS = str.maketrans({"+": "x", "/": "x", "=": "x"})


def _check_length(length: int) -> None:
    if length < 0:
        raise ValidationError(
            f"Identifier length must not be negative, got {length}",
            field="length",
            value=length,
            constraint="non_negative",
        )


def random_identifier(length: int = DEFAULT_ID_LENGTH) -> str:
    """
    Generate a cryptographically strong random alphanumeric string.

    Each random byte picks one character of ``ID_ALPHABET`` by modulo; the
    bytes are consumed last-to-first.

    Args:
        length: Number of characters (default 17)

    Returns:
        String of exactly ``length`` characters from ``ID_ALPHABET``
    """
    _check_length(length)
    data = secrets.token_bytes(length)
    return "".join(ID_ALPHABET[byte % len(ID_ALPHABET)] for byte in reversed(data))


def deterministic_identifier(key: str, length: int = DEFAULT_ID_LENGTH) -> str:
    """
    Generate a unique, deterministic record ID from ``key``.

    SHA-256 of the UTF-8 key, base64 encoded, with ``+``, ``/`` and ``=``
    replaced by ``x``, truncated to ``length``. The full digest is 44
    characters, which caps the output length.
    """
    _check_length(length)
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    encoded = base64.b64encode(digest).decode("ascii")
    return encoded.translate(_B64_SYMBOLS)[:length]


__all__ = [
    "ID_ALPHABET",
    "DEFAULT_ID_LENGTH",
    "random_identifier",
    "deterministic_identifier",
]
