"""
Time utilities for vesting schedules.

Vesting times are unsigned unix timestamps in seconds. Instructions read
"now" exactly once from an injected clock so that every check within one
instruction sees the same instant.
"""

import re
import time
from datetime import date, datetime, timezone
from typing import Callable, Union

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY

Clock = Callable[[], int]

# PnYnMnWnDTnHnMnS, integer components only
_ISO_DURATION = re.compile(
    r"^P(?!$)(?:(?P<years>\d+)Y)?(?:(?P<months>\d+)M)?(?:(?P<weeks>\d+)W)?(?:(?P<days>\d+)D)?"
    r"(?:T(?=\d)(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)

_DURATION_UNITS = {
    "years": YEAR,
    "months": MONTH,
    "weeks": WEEK,
    "days": DAY,
    "hours": HOUR,
    "minutes": MINUTE,
    "seconds": 1,
}


class SystemClock:
    """Wall-clock time in whole seconds."""

    def __call__(self) -> int:
        return int(time.time())


class FixedClock:
    """Clock frozen at a settable instant."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def parse_iso_duration(value: str) -> int:
    """
    Parse an ISO-8601 duration into seconds.

    Years count as 365 days and months as 30 days. ``"P"`` alone is the
    empty duration.

    Args:
        value: Duration such as ``"P1Y2M"`` or ``"PT12H"``

    Returns:
        Duration in seconds

    Raises:
        ValueError: If the string is not an integer ISO-8601 duration
    """
    if value == "P":
        return 0
    match = _ISO_DURATION.match(value)
    if match is None:
        raise ValueError(f"Invalid ISO-8601 duration: {value!r}")
    return sum(
        int(amount) * _DURATION_UNITS[unit]
        for unit, amount in match.groupdict().items()
        if amount is not None
    )


def to_unix_timestamp(value: Union[int, str, datetime, date]) -> int:
    """
    Convert a schedule time into a unix timestamp.

    Accepts integer seconds, ISO-8601 datetime strings and datetime or date
    objects. Naive datetimes are interpreted as UTC.

    Raises:
        ValueError: If the value is negative or cannot be interpreted
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int):
        timestamp = value
    else:
        if isinstance(value, str):
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        elif not isinstance(value, date):
            raise ValueError(f"Invalid timestamp: {value!r}")
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        timestamp = int(value.timestamp())

    if timestamp < 0:
        raise ValueError(f"Timestamp must not be negative: {timestamp}")
    return timestamp


def format_timestamp(timestamp: int) -> str:
    """Format a unix timestamp as an ISO-8601 UTC string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
