"""Date and time helpers shared by the generators, validators and exporters."""

from __future__ import annotations

import datetime
import logging
import os
import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from .exceptions import TimeFormatError

logger = logging.getLogger(__name__)

# Calendar timezone advertised in exports when nothing else is configured
DEFAULT_CALENDAR_TIMEZONE = "America/Chicago"

_LOCAL_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_CLOCK_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def now_utc() -> datetime.datetime:
    """Return current UTC time with tzinfo.

    Can be overridden for testing via the CALLBOARD_TEST_TIME environment variable.
    Format: ISO 8601 datetime string (e.g., "2024-06-01T08:20:00-05:00").
    Naive test times are assumed to be UTC.
    """
    test_time = os.environ.get("CALLBOARD_TEST_TIME")
    if test_time:
        try:
            dt = date_parser.isoparse(test_time)
            if dt.tzinfo is not None:
                return dt.astimezone(datetime.UTC)
            return dt.replace(tzinfo=datetime.UTC)
        except (ValueError, OverflowError) as e:
            logger.warning("Failed to parse CALLBOARD_TEST_TIME=%r: %s", test_time, e)

    return datetime.datetime.now(datetime.UTC)


def parse_local_date(value: str | datetime.date | None) -> datetime.date | None:
    """Parse a YYYY-MM-DD string as a calendar date.

    The value is read as a wall-calendar date, never shifted through UTC.
    Returns None for empty or malformed input instead of raising.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value

    match = _LOCAL_DATE_RE.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime.date(year, month, day)
    except ValueError:
        return None


def parse_clock_time(value: str | datetime.time) -> datetime.time:
    """Parse an "HH:MM" (or "HH:MM:SS") wall-clock string.

    Raises:
        TimeFormatError: if the value is not a valid time of day
    """
    if isinstance(value, datetime.time):
        return value

    match = _CLOCK_TIME_RE.match(str(value).strip())
    if not match:
        raise TimeFormatError(f"Invalid time {value!r}; expected HH:MM")
    hours, minutes, seconds = match.groups()
    try:
        return datetime.time(int(hours), int(minutes), int(seconds or 0))
    except ValueError as exc:
        raise TimeFormatError(f"Invalid time {value!r}; expected HH:MM") from exc


def clock_to_minutes(value: str | datetime.time) -> int:
    """Convert a wall-clock time to minutes since midnight."""
    parsed = parse_clock_time(value)
    return parsed.hour * 60 + parsed.minute


def minutes_to_clock(minutes: int) -> str:
    """Format minutes since midnight as zero-padded "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def combine_date_and_time(day: datetime.date, clock: str | datetime.time) -> datetime.datetime:
    """Combine a calendar date and a wall-clock time into a naive local datetime."""
    return datetime.datetime.combine(day, parse_clock_time(clock))


def to_epoch_millis(value: datetime.date | datetime.datetime) -> int:
    """Milliseconds since the epoch, treating naive values as UTC.

    Plain dates are taken at midnight. Used only to build stable identity keys,
    so the zone assumption only needs to be consistent, not correct.
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.UTC)
    return int(value.timestamp() * 1000)


def ensure_aware(value: datetime.datetime, tz_name: str = DEFAULT_CALENDAR_TIMEZONE) -> datetime.datetime:
    """Attach the calendar timezone to naive datetimes; aware values pass through."""
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=get_zone(tz_name))


def get_zone(tz_name: str) -> datetime.tzinfo:
    """Resolve an IANA timezone name, falling back to UTC for unknown names."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; falling back to UTC", tz_name)
        return datetime.UTC
