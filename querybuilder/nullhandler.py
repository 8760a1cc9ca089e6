"""Helpers turning plain values into nullable database values.

A value counts as NULL when it holds its type's zero or empty value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")

_TIME_FORMAT = "%H:%M:%S"


@dataclass(frozen=True)
class NullValue(Generic[T]):
    """A value with a flag telling whether it is set (not NULL)."""

    value: T
    valid: bool = False


def _is_zero_time(t: Any) -> bool:
    if t is None:
        return True
    if isinstance(t, datetime):
        offset = t.utcoffset() or timedelta(0)
        try:
            naive_utc = t.replace(tzinfo=None) - offset
        except OverflowError:
            return False
        return naive_utc == datetime.min
    if isinstance(t, date):
        return t == date.min
    return False


def time_to_null(t: Optional[date | time]) -> NullValue:
    """Wrap a date, datetime or time; it is NULL when missing or the zero instant."""
    return NullValue(t, not _is_zero_time(t))


def parse_date_to_time(s: str) -> NullValue:
    """Parse an ``HH:MM:SS`` string into a time; it is NULL when it does not parse."""
    try:
        parsed = datetime.strptime(s, _TIME_FORMAT).time()
    except (TypeError, ValueError):
        return time_to_null(None)
    return time_to_null(parsed)


def int64_to_null(i: int) -> NullValue:
    """Wrap an integer; it is NULL unless it is greater than zero."""
    return NullValue(i, i > 0)


def string_to_null(s: str) -> NullValue:
    """Wrap a string; it is NULL when empty."""
    return NullValue(s, s != "")


def float64_to_null(f: float) -> NullValue:
    """Wrap a float; it is NULL unless it is greater than zero."""
    return NullValue(f, f > 0)


def bool_to_null(b: Optional[bool]) -> NullValue:
    """Wrap an optional boolean; it is NULL when ``None``."""
    if b is None:
        return NullValue(False, False)
    return NullValue(bool(b), True)