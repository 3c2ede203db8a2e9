"""
Scenario Value Helpers

Scenario files and config are hand-written JSON, so flags show up as
real booleans, 0/1, or strings like "false". bool("false") is True,
which is why flags go through to_bool() instead.
"""

from typing import Any

_TRUE_STRINGS = frozenset({'true', '1', 'yes', 'on'})
_FALSE_STRINGS = frozenset({'false', '0', 'no', 'off', ''})


def to_bool(value: Any, default: bool = False) -> bool:
    """
    Coerce a scenario flag to bool.

    Args:
        value: bool, 0/1, a true/false style string, or None
        default: Returned when value is None

    Raises:
        ValueError: If the value is not a recognisable flag
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"Not a boolean flag: {value!r}")
