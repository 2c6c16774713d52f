"""
Time utilities for polyarb.

All internal timestamps use UTC; conversion to the display timezone only
happens when rendering.
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

import pytz

# Seconds fraction of any length; fromisoformat before 3.11 only takes 3 or 6 digits
_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """Resolve a timezone name, falling back to UTC for unknown names."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def now_utc() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def to_local(dt: datetime, tz_name: str = "UTC") -> datetime:
    """Convert datetime to the given timezone (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(get_timezone(tz_name))


def format_timestamp(dt: Optional[datetime] = None, fmt: str = "iso") -> str:
    """
    Format datetime to string.

    Args:
        dt: Datetime to format. Uses current UTC time if not provided.
        fmt: Format type - 'iso', 'display', 'date', 'time', or a strftime string

    Returns:
        Formatted string
    """
    if dt is None:
        dt = now_utc()

    if fmt == "iso":
        # Millisecond precision with a Z suffix, like JavaScript's toISOString()
        dt = dt.astimezone(timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

    formats = {
        "display": "%Y-%m-%d %H:%M:%S",
        "date": "%Y-%m-%d",
        "time": "%H:%M:%S",
    }

    return dt.strftime(formats.get(fmt, fmt))


def parse_iso_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp leniently.

    Accepts a trailing 'Z' and fractional seconds of any precision
    (truncated to microseconds). Returns None for absent or malformed input;
    naive results are assumed to be UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)

    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
