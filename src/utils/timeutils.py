"""Timestamp helpers.

All timestamps are stored as ISO-8601 strings in UTC with microsecond
precision, so that lexicographic order equals chronological order and the
database can compare them with plain string operators.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def utc_isoformat(value: datetime) -> str:
    """Normalize an aware or naive (assumed UTC) datetime to the storage format."""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat(timespec="microseconds")


def utc_now_iso() -> str:
    return utc_isoformat(utc_now())


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a stored or user-supplied timestamp into an aware UTC datetime.

    Accepts full ISO-8601 timestamps (with ``Z`` or an offset) and bare
    ``YYYY-MM-DD`` dates, which are read as midnight UTC.

    Raises:
        ValueError: If the string is not a valid timestamp.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed.astimezone(pytz.utc)


def start_of_day(value: datetime) -> datetime:
    value = value.astimezone(pytz.utc)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def day_window(now: datetime, lookback_days: int = 1) -> Tuple[datetime, datetime]:
    """Return ``[start of (today - lookback_days), start of today)`` in UTC."""
    if lookback_days < 1:
        raise ValueError("lookback_days must be at least 1")
    end = start_of_day(now)
    return end - timedelta(days=lookback_days), end


def today_utc() -> date:
    return utc_now().date()
