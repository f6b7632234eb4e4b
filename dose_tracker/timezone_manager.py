"""
Centralized timezone handling for the Dose Tracker application.

All wall-clock to instant conversions go through this module.

Principles:
1. The database always stores UTC timestamps
2. Schedule times are local wall-clock times in the schedule's own zone
3. DST gaps and overlaps are resolved explicitly, never by accident
"""

import logging
import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

import pytz

logger = logging.getLogger(__name__)

# Zone used for new care-recipient profiles and for schedules without a zone
DEFAULT_TIMEZONE = "America/New_York"

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
LOCAL_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def resolve_timezone(
    timezone_name: Optional[str], default: str = DEFAULT_TIMEZONE
) -> pytz.BaseTzInfo:
    """
    Return the pytz zone for a name, falling back to the default zone.

    Empty strings count as missing.

    Raises:
        ValueError: If the name is not a known IANA zone
    """
    name = timezone_name or default
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {name}") from None


def validate_timezone(timezone_name: str) -> bool:
    """
    Validate if a timezone name is a known IANA zone.

    Args:
        timezone_name: Name of timezone to validate

    Returns:
        True if timezone is valid, False otherwise
    """
    try:
        pytz.timezone(timezone_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def parse_time_of_day(value: str) -> Tuple[int, int]:
    """
    Parse an "HH:MM" string into (hour, minute).

    Raises:
        ValueError: If the string is not a valid 24h time
    """
    match = TIME_OF_DAY_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time of day: {value}")
    return int(match.group(1)), int(match.group(2))


def parse_local_date(value) -> date:
    """Parse a "YYYY-MM-DD" string; date objects pass through."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not LOCAL_DATE_PATTERN.match(value):
        raise ValueError(f"Invalid local date: {value}")
    return date.fromisoformat(value)


def ensure_timezone_utc(dt: datetime) -> datetime:
    """
    Return the datetime as timezone-aware UTC.

    Naive datetimes are assumed to already be UTC (SQLite drops offsets).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_instant(dt: datetime) -> str:
    """Canonical ISO-8601 rendering of an instant in UTC."""
    return ensure_timezone_utc(dt).isoformat()


def local_date_of(instant: datetime, tz: pytz.BaseTzInfo) -> date:
    """Calendar date of an instant as seen in the given zone."""
    return ensure_timezone_utc(instant).astimezone(tz).date()


def localize_wall_clock(naive_dt: datetime, tz: pytz.BaseTzInfo) -> datetime:
    """
    Attach a zone to a naive wall-clock datetime.

    Ambiguous times (DST fall-back) resolve to the earlier instant, i.e. the
    pre-transition offset. Nonexistent times (DST spring-forward) are moved
    forward by the length of the gap, so 02:30 becomes 03:30 across a
    one-hour gap.
    """
    try:
        return tz.localize(naive_dt, is_dst=None)
    except pytz.AmbiguousTimeError:
        local_dt = tz.localize(naive_dt, is_dst=True)
        logger.debug(f"Ambiguous time {naive_dt} in {tz.zone}, using {local_dt.isoformat()}")
        return local_dt
    except pytz.NonExistentTimeError:
        # Localizing with the pre-gap offset and normalizing lands past the gap
        local_dt = tz.normalize(tz.localize(naive_dt, is_dst=False))
        if local_dt.replace(tzinfo=None) < naive_dt:
            local_dt = tz.normalize(tz.localize(naive_dt, is_dst=True))
        logger.warning(
            f"Non-existent time {naive_dt} in {tz.zone}, moved to {local_dt.isoformat()}"
        )
        return local_dt


def wall_clock_to_utc(
    for_date: date, hour: int, minute: int, tz: pytz.BaseTzInfo
) -> datetime:
    """
    Convert a local date plus wall-clock time in a zone to a UTC instant.

    Args:
        for_date: Local calendar date
        hour: Hour in 24h format
        minute: Minute
        tz: Zone the wall-clock time is expressed in

    Returns:
        Timezone-aware datetime in UTC
    """
    naive_dt = datetime(for_date.year, for_date.month, for_date.day, hour, minute)
    return localize_wall_clock(naive_dt, tz).astimezone(timezone.utc)


def iter_local_dates(first: date, last: date):
    """Yield every calendar date from first to last inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)
