"""
date_time_helper.py

Provides helper functions for parsing and normalizing date and time values
delivered by the backend, and for UTC timestamps used by the audit log.

All features and modules should use ONLY these helpers for date/time logic.
Naive datetimes are interpreted as UTC, plain dates as midnight UTC.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Optional

# .NET trims trailing zeros and writes up to 7 digits; fromisoformat wants exactly 6 on 3.10
_FRACTION_RE = re.compile(r"\.(\d+)")


def utc_now() -> datetime:
    """Returns the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO8601 string (YYYY-MM-DDTHH:MM:SS+00:00).
    Used for logging and DB storage.
    """
    return utc_now().replace(microsecond=0).isoformat()


def as_utc(value: datetime | date) -> datetime:
    """
    Normalizes a datetime or date to an aware UTC datetime.

    :param value: Aware or naive datetime, or a plain date
    :return: Aware datetime in UTC
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_wire_datetime(value: Any) -> Optional[datetime]:
    """
    Parses a date/time value from a backend payload.

    Accepts datetime/date objects and ISO8601 strings (with or without "Z",
    with date-only form). Empty values return None.

    :raises ValueError: If the string is not a valid ISO8601 value
    """
    if value is None or value == "":
        return None
    if isinstance(value, (datetime, date)):
        return as_utc(value)

    raw = str(value).strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    raw = _FRACTION_RE.sub(_six_digit_fraction, raw)
    if len(raw) == 10:
        return as_utc(date.fromisoformat(raw))
    return as_utc(datetime.fromisoformat(raw))


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")
