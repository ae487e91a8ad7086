"""UTC helpers and millisecond time arithmetic.

All times are timezone-aware UTC. The core's time unit is one millisecond:
a bar's close_time is its open_time plus the bar duration minus 1 ms.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

TIME_UNIT = timedelta(milliseconds=1)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def from_millis(ms: int) -> datetime:
    """Convert epoch milliseconds to a UTC datetime.

    Uses timedelta arithmetic rather than fromtimestamp() so that large
    values keep exact millisecond precision.
    """
    return _EPOCH + timedelta(milliseconds=ms)


def to_millis(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return (dt - _EPOCH) // TIME_UNIT


def close_time_for(open_time: datetime, duration: timedelta) -> datetime:
    """Close time of a bar that opens at open_time and lasts duration."""
    return open_time + duration - TIME_UNIT


def is_whole_millis(duration: timedelta) -> bool:
    """True if duration is a positive whole number of milliseconds."""
    return duration > timedelta(0) and duration % TIME_UNIT == timedelta(0)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 with millisecond precision and Z suffix.

    Output format: YYYY-MM-DDTHH:MM:SS.fffZ
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    utc_dt = dt.astimezone(UTC)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"
