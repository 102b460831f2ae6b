"""
Shared parsing helpers for the coercion layer.

These are pure-Python helpers with no infrastructure dependencies.
"""

from __future__ import annotations

import datetime
import itertools
import re
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Interval parsing
# ---------------------------------------------------------------------------

# [-][d.]hh:mm[:ss[.fffffff]]
_CLOCK_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?$"
)
_DAY_RE = re.compile(r"(\d+)\s*days?", re.IGNORECASE)
_HOUR_RE = re.compile(r"(\d+)\s*hours?", re.IGNORECASE)
_MIN_RE = re.compile(r"(\d+)\s*minutes?", re.IGNORECASE)
_SEC_RE = re.compile(r"(\d+)\s*seconds?", re.IGNORECASE)
# Shorthand: 7d, 24h, 30m, 90s, 2w
_SHORTHAND_RE = re.compile(r"^(\d+)\s*([dhmsw])$", re.IGNORECASE)

_SHORTHAND_UNITS = {
    "d": "days",
    "h": "hours",
    "m": "minutes",
    "s": "seconds",
    "w": "weeks",
}


def _parse_clock(match: re.Match[str]) -> datetime.timedelta:
    hours = int(match.group("hours"))
    minutes = int(match.group("minutes"))
    seconds = int(match.group("seconds") or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"Interval component out of range: {match.string}")
    fraction = match.group("fraction") or ""
    # Fractions carry up to seven digits (100ns ticks); keep microseconds.
    microseconds = int(fraction.ljust(6, "0")[:6]) if fraction else 0
    delta = datetime.timedelta(
        days=int(match.group("days") or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=microseconds,
    )
    return -delta if match.group("sign") else delta


def parse_interval(value: Any) -> datetime.timedelta:
    """
    Parse an interval string into a ``timedelta``.

    Supported formats:
    - ``"1:30:00"``, ``"-2.04:00:00"``, ``"00:00:01.5"`` (``[-][d.]hh:mm[:ss[.f]]``)
    - ``"7d"``, ``"24h"``, ``"30m"``, ``"90s"``, ``"2w"``
    - ``"1 day"``, ``"3 hours"``, ``"1 day 2 hours 30 minutes"``
    - Plain numeric string → treated as seconds

    Raises:
        ValueError: If no format matches.
    """
    if isinstance(value, datetime.timedelta):
        return value

    text = str(value).strip()

    sm = _SHORTHAND_RE.match(text)
    if sm:
        amount = int(sm.group(1))
        unit = sm.group(2).lower()
        return datetime.timedelta(**{_SHORTHAND_UNITS[unit]: amount})

    cm = _CLOCK_RE.match(text)
    if cm:
        return _parse_clock(cm)

    days = hours = minutes = seconds = 0
    dm = _DAY_RE.search(text)
    if dm:
        days = int(dm.group(1))
    hm = _HOUR_RE.search(text)
    if hm:
        hours = int(hm.group(1))
    mm = _MIN_RE.search(text)
    if mm:
        minutes = int(mm.group(1))
    secm = _SEC_RE.search(text)
    if secm:
        seconds = int(secm.group(1))

    if days or hours or minutes or seconds:
        return datetime.timedelta(
            days=days,
            hours=hours,
            minutes=minutes,
            seconds=seconds,
        )

    # Fallback: parse as seconds
    try:
        return datetime.timedelta(seconds=float(text))
    except (ValueError, OverflowError) as err:
        raise ValueError(f"Unrecognised interval format: {value}") from err


# ---------------------------------------------------------------------------
# Temporal parsing
# ---------------------------------------------------------------------------


def parse_datetime(value: str) -> datetime.datetime:
    """ISO-8601 datetime; a trailing ``Z`` means UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


def parse_date(value: str) -> datetime.date:
    text = value.strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        return parse_datetime(text).date()


def parse_time(value: str) -> datetime.time:
    return datetime.time.fromisoformat(value.strip())


# ---------------------------------------------------------------------------
# Boolean parsing
# ---------------------------------------------------------------------------

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "n", "off"})


def parse_bool(value: str) -> bool:
    """
    Parse a boolean literal.

    Raises:
        ValueError: If the text is not a recognised truth value.
    """
    low = value.strip().lower()
    if low in _TRUE_STRINGS:
        return True
    if low in _FALSE_STRINGS:
        return False
    raise ValueError(f"Unrecognised boolean: {value!r}")


# ---------------------------------------------------------------------------
# Stringification
# ---------------------------------------------------------------------------


def to_text(value: Any) -> str:
    """
    Render *value* as text for string operators.

    Enum members render by name; everything else via ``str``.
    """
    if isinstance(value, Enum):
        return value.name
    return str(value)


# ---------------------------------------------------------------------------
# Element type inference
# ---------------------------------------------------------------------------


def peek_element_type(source: Iterable[Any]) -> tuple[type | None, Iterable[Any]]:
    """
    Infer the element type of *source* from its first item.

    Returns ``(type, iterable)``.  Sequences are indexed and returned
    as-is; other iterables are advanced by one item and re-chained, so the
    returned iterable must be used in place of *source*.  An empty source
    yields ``None`` for the type.
    """
    if isinstance(source, Sequence):
        return (type(source[0]) if len(source) else None), source
    iterator = iter(source)
    try:
        first = next(iterator)
    except StopIteration:
        return None, ()
    return type(first), itertools.chain((first,), iterator)
