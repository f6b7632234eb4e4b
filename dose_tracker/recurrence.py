"""
DST-safe expansion of medication schedules into dose instants.

Window semantics are half-open, [window_from, window_to):
- a dose exactly at window_from IS included
- a dose exactly at window_to is NOT included

Adjacent windows can share a boundary without producing a dose twice.
"""

# Standard library imports
import logging
from datetime import datetime
from typing import List

# Local application imports
from .errors import InvalidWindowError, ScheduleValidationError
from .models.schedule import RecurrenceType, decode_days_of_week
from .schedule_validation import check_days_of_week
from .timezone_manager import (
    DEFAULT_TIMEZONE,
    ensure_timezone_utc,
    iter_local_dates,
    local_date_of,
    parse_local_date,
    parse_time_of_day,
    resolve_timezone,
    wall_clock_to_utc,
)

# Create a logger for this module
logger = logging.getLogger(__name__)


def generate_occurrences(
    schedule,
    window_from: datetime,
    window_to: datetime,
    default_timezone: str = DEFAULT_TIMEZONE,
) -> List[datetime]:
    """
    Generate the UTC instants at which a schedule's doses fall in a window.

    Local calendar dates are walked in the schedule's zone and the
    time_of_day is applied to each qualifying date. Nonexistent wall-clock
    times are moved past the DST gap, ambiguous ones take the earlier
    instant.

    Args:
        schedule: A MedicationSchedule or any object with the same fields
        window_from: Window start (inclusive)
        window_to: Window end (exclusive)
        default_timezone: Zone used when the schedule has none

    Returns:
        Ascending list of timezone-aware UTC datetimes

    Raises:
        InvalidWindowError: If window_from > window_to
        ScheduleValidationError: If the recurrence rule is malformed
    """
    window_from = ensure_timezone_utc(window_from)
    window_to = ensure_timezone_utc(window_to)

    if window_from > window_to:
        raise InvalidWindowError()
    if window_from == window_to:
        return []

    try:
        days_of_week = decode_days_of_week(schedule.days_of_week)
    except ValueError:
        raise ScheduleValidationError(
            "days_of_week must be a JSON list", details={"field": "days_of_week"}
        ) from None
    recurrence = check_days_of_week(schedule.recurrence, days_of_week)

    try:
        hour, minute = parse_time_of_day(schedule.time_of_day)
        start_date = parse_local_date(schedule.start_date)
        end_date = parse_local_date(schedule.end_date) if schedule.end_date else None
        tz = resolve_timezone(schedule.timezone, default_timezone)
    except ValueError as e:
        raise ScheduleValidationError(str(e)) from None

    first_day = max(start_date, local_date_of(window_from, tz))
    last_day = local_date_of(window_to, tz)
    if end_date is not None:
        last_day = min(last_day, end_date)

    weekdays = set(days_of_week or ())
    occurrences = []

    for local_day in iter_local_dates(first_day, last_day):
        if recurrence == RecurrenceType.WEEKLY and local_day.isoweekday() not in weekdays:
            continue

        scheduled_for = wall_clock_to_utc(local_day, hour, minute, tz)
        if window_from <= scheduled_for < window_to:
            occurrences.append(scheduled_for)

    logger.debug(
        f"Schedule {getattr(schedule, 'id', None)}: {len(occurrences)} occurrences "
        f"in [{window_from.isoformat()}, {window_to.isoformat()})"
    )
    return occurrences
