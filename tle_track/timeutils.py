"""
Epoch and timestamp helpers.

Timestamps are Unix milliseconds (int) throughout tle_track; these helpers
convert TLE epochs and datetimes into that form.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple, Union

from sgp4.api import jday

from tle_track.config import MS_PER_DAY

TimeLike = Union[int, float, datetime, None]


def resolve_epoch_year(epoch_year: int) -> int:
    """Map a two-digit TLE year to four digits (57-99 -> 1900s, 00-56 -> 2000s)."""
    return 1900 + epoch_year if epoch_year >= 57 else 2000 + epoch_year


def day_of_year_to_timestamp(day_of_year: float, year: Optional[int] = None) -> int:
    """
    Convert a fractional day of the year to a Unix timestamp in ms.

    Day 1.0 is midnight UTC on January 1st.

    Args:
        day_of_year: Fractional day of the year
        year: Four-digit year (default: current UTC year)
    """
    if year is None:
        year = datetime.now(timezone.utc).year
    year_start_ms = datetime(year, 1, 1, tzinfo=timezone.utc).timestamp() * 1000
    return int(math.floor(year_start_ms + (day_of_year - 1) * MS_PER_DAY))


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def to_timestamp_ms(value: TimeLike = None) -> int:
    """
    Coerce a time value to Unix milliseconds.

    None means now; naive datetimes are taken as UTC.
    """
    if value is None:
        return now_ms()
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(round(value.timestamp() * 1000))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected a timestamp in ms or a datetime, got {type(value).__name__}")
    return int(value)


def timestamp_to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


def timestamp_to_jd_fr(timestamp_ms: int) -> Tuple[float, float]:
    """
    Convert a Unix timestamp in ms to a Julian date and fraction for sgp4.

    Returns:
        Tuple of (julian_day, fraction)
    """
    dt = timestamp_to_datetime(timestamp_ms)
    return jday(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second + dt.microsecond / 1e6)
