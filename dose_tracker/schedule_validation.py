"""
Validation of medication schedule fields.

The recurrence/days-of-week rule is checked here for incoming data and
again by the occurrence generator before it expands a rule.
"""

# Standard library imports
import logging
from datetime import date
from typing import Iterable, Optional, Union

# Local application imports
from .errors import ScheduleValidationError
from .models.schedule import RecurrenceType
from .timezone_manager import parse_local_date, parse_time_of_day, validate_timezone

# Create a logger for this module
logger = logging.getLogger(__name__)

ISO_WEEKDAYS = range(1, 8)


def coerce_recurrence(recurrence: Union[RecurrenceType, str]) -> RecurrenceType:
    """Accept a RecurrenceType or its string value."""
    if isinstance(recurrence, RecurrenceType):
        return recurrence
    try:
        return RecurrenceType(recurrence)
    except ValueError:
        raise ScheduleValidationError(
            f"Unsupported recurrence: {recurrence}", details={"field": "recurrence"}
        ) from None


def check_days_of_week(
    recurrence: Union[RecurrenceType, str], days_of_week: Optional[Iterable[int]]
) -> RecurrenceType:
    """
    Enforce that weekly rules name at least one ISO weekday and daily rules
    name none.

    Returns:
        The recurrence as a RecurrenceType
    """
    recurrence = coerce_recurrence(recurrence)
    days = list(days_of_week) if days_of_week is not None else None

    if recurrence == RecurrenceType.WEEKLY:
        if not days:
            raise ScheduleValidationError(
                "Weekly schedules must specify at least one day of week",
                details={"field": "days_of_week"},
            )
        for day in days:
            if isinstance(day, bool) or not isinstance(day, int) or day not in ISO_WEEKDAYS:
                raise ScheduleValidationError(
                    f"Invalid day of week: {day}", details={"field": "days_of_week"}
                )
    elif days is not None:
        raise ScheduleValidationError(
            "Daily schedules must not specify days of week",
            details={"field": "days_of_week"},
        )

    return recurrence


def validate_schedule_fields(
    recurrence: Union[RecurrenceType, str],
    time_of_day: str,
    start_date: Union[date, str],
    timezone_name: Optional[str] = None,
    days_of_week: Optional[Iterable[int]] = None,
    end_date: Union[date, str, None] = None,
) -> None:
    """
    Validate a full set of schedule fields.

    Args:
        recurrence: "daily" or "weekly"
        time_of_day: Local time in "HH:MM" format
        start_date: First local date, date or "YYYY-MM-DD"
        timezone_name: IANA zone name, empty for the default zone
        days_of_week: ISO weekdays for weekly schedules
        end_date: Optional inclusive last local date

    Raises:
        ScheduleValidationError: On the first invalid field
    """
    check_days_of_week(recurrence, days_of_week)

    try:
        parse_time_of_day(time_of_day)
    except ValueError:
        raise ScheduleValidationError(
            "time_of_day must be HH:MM format", details={"field": "time_of_day"}
        ) from None

    if timezone_name and (len(timezone_name) > 64 or not validate_timezone(timezone_name)):
        raise ScheduleValidationError(
            "timezone must be a valid IANA timezone", details={"field": "timezone"}
        )

    try:
        start = parse_local_date(start_date)
    except ValueError:
        raise ScheduleValidationError(
            "start_date must be YYYY-MM-DD", details={"field": "start_date"}
        ) from None

    if end_date is not None:
        try:
            end = parse_local_date(end_date)
        except ValueError:
            raise ScheduleValidationError(
                "end_date must be YYYY-MM-DD", details={"field": "end_date"}
            ) from None
        if end < start:
            raise ScheduleValidationError(
                "end_date must be on or after start_date", details={"field": "end_date"}
            )
