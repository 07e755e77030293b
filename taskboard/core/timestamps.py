"""Helpers for the integer-seconds timestamps used on the wire and in storage."""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any

_DATE_INPUT_RE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")


def seconds_to_datetime(seconds: Any) -> datetime | None:
    if seconds is None or isinstance(seconds, bool):
        return None
    if not isinstance(seconds, (int, float)) or not math.isfinite(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OSError, OverflowError, ValueError):
        return None


def parse_date_input(value: str) -> int | None:
    """Parse a ``YYYY-MM-DD`` value into seconds at 00:00:00 UTC of that day."""

    match = _DATE_INPUT_RE.match((value or "").strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        parsed = datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None
    return int(parsed.timestamp())


def to_seconds(value: Any) -> int | None:
    """Coerce a due-date style value to whole seconds since epoch.

    Accepts integer/float seconds, ``datetime``/``date`` objects, ``YYYY-MM-DD``
    strings and ISO-8601 timestamps. Returns None when the value cannot be
    interpreted as a point in time.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        return int(math.floor(value))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    if isinstance(value, date):
        return int(datetime(value.year, value.month, value.day, tzinfo=timezone.utc).timestamp())
    if isinstance(value, str) and value.strip():
        from_input = parse_date_input(value)
        if from_input is not None:
            return from_input
        try:
            return to_seconds(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None
