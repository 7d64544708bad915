from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any


def to_value_string(value: Any) -> str:
    """Render ``value`` in its natural, locale-independent string form.

    Booleans render as ``true``/``false``, enum members as their value,
    dates and times as ISO 8601. Everything else goes through ``str()``.
    """

    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return to_value_string(value.value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)
