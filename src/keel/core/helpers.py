"""
Small general-purpose helpers shared by services.

Tags:
    helpers, utilities, keel-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import math
import random
import re
from datetime import datetime
from typing import Any, TypeVar

from keel.core.errors import ValidationError

T = TypeVar("T")

_REGEXP_SPECIAL = re.compile(r"[.*+?^${}()|\[\]\\]")


def get_random_int(max_excluded: float) -> int:
    """Return a random integer in ``[0, max_excluded)``, or 0 when the bound floors to 0.

    Not suitable for anything security sensitive; use ``keel.core.ids`` for that.
    """
    upper = math.floor(max_excluded)
    if upper <= 0:
        return 0
    return random.randrange(upper)


def parse_date_from_json(value: Any) -> Any:
    """
    Convert an ISO-8601 string (as transferred in JSON) to a ``datetime``.

    Anything that is not a string is returned unchanged, so the function is
    safe to apply to values that were already parsed. A trailing ``Z`` is
    read as UTC.
    """
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    return value


def remove_from_list(items: list[T], element: T) -> bool:
    """Remove the first occurrence of ``element``. Returns whether anything was removed."""
    try:
        items.remove(element)
    except ValueError:
        return False
    return True


def escape_regexp(text: str) -> str:
    r"""Escape regex metacharacters, e.g. ``"myfile.*"`` becomes ``"myfile\.\*"``."""
    return _REGEXP_SPECIAL.sub(lambda match: "\\" + match.group(0), str(text))


def left_pad(text: Any, length: int, ch: Any = " ") -> str:
    """Pad ``text`` on the left with ``ch`` up to ``length`` characters."""
    text = str(text)
    if not ch and ch != 0:
        ch = " "
    missing = length - len(text)
    if missing <= 0:
        return text
    return str(ch) * missing + text


def weighted_average(val1: float, weight1: float, val2: float, weight2: float) -> float:
    return (val1 * weight1 + val2 * weight2) / (weight1 + weight2)


def check_param_type_or_raise(
    value: Any,
    name: str,
    types: type | tuple[type, ...],
    type_name: str,
    is_optional: bool = False,
) -> None:
    """
    Raise ``ValidationError`` unless ``value`` is an instance of ``types``.

    Args:
        value: Parameter value to check
        name: Parameter name, used in the message
        types: A class or a tuple of classes
        type_name: Human-readable name of the expected type(s)
        is_optional: Accept ``None``
    """
    if is_optional and value is None:
        return

    if not isinstance(value, types):
        raise ValidationError(
            f'Parameter "{name}" must be an instance of {type_name}',
            field=name,
            value=value,
            constraint="type",
        )


__all__ = [
    "get_random_int",
    "parse_date_from_json",
    "remove_from_list",
    "escape_regexp",
    "left_pad",
    "weighted_average",
    "check_param_type_or_raise",
]
