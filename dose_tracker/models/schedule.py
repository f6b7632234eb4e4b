"""
This module defines medication schedule models.
"""

# Standard library imports
from datetime import date, datetime
import enum
import json
import logging
from typing import List, Optional, TYPE_CHECKING

# Third-party imports
from sqlalchemy import Date, DateTime, Enum, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from .base import db, new_id, utcnow

if TYPE_CHECKING:
    from .medication import Medication

# Create a logger for this module
logger = logging.getLogger(__name__)


def decode_days_of_week(days_of_week) -> Optional[List[int]]:
    """Return a weekday list, decoding legacy JSON strings."""
    if days_of_week is None:
        return None
    if isinstance(days_of_week, str):
        return json.loads(days_of_week)
    return list(days_of_week)


class RecurrenceType(enum.Enum):
    """Enum for the supported recurrence patterns."""

    DAILY = "daily"
    WEEKLY = "weekly"  # Specific ISO weekdays, 1=Monday, 7=Sunday


class MedicationSchedule(db.Model):
    """
    Model representing one recurrence rule for a medication.
    Multiple schedules can be defined for a single medication.
    """

    __tablename__ = "medication_schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    medication_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("medications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    recurrence: Mapped[RecurrenceType] = mapped_column(Enum(RecurrenceType), nullable=False)

    # Local wall-clock time in 24h "HH:MM" format
    time_of_day: Mapped[str] = mapped_column(String(5), nullable=False)

    # IANA zone name; empty means the application default zone
    timezone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # JSON array of ISO weekday numbers, only for weekly schedules
    days_of_week: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    # Local calendar dates, end_date inclusive
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    dosage_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    medication: Mapped["Medication"] = relationship("Medication", back_populates="schedules")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<MedicationSchedule {self.id} for medication {self.medication_id}>"

    @property
    def formatted_days_of_week(self) -> Optional[List[int]]:
        return decode_days_of_week(self.days_of_week)

    def is_ended_by(self, on_date: date) -> bool:
        """True when the schedule has no occurrences after on_date."""
        return self.end_date is not None and self.end_date <= on_date

    def end(self, on_date: date) -> None:
        """
        End the schedule on the given local date, keeping its history.

        The end date never moves before the start date.
        """
        self.end_date = max(on_date, self.start_date)
        logger.info(f"Schedule {self.id} ended on {self.end_date.isoformat()}")

    def validate(self) -> None:
        """Check the recurrence rule, raising ScheduleValidationError."""
        from ..schedule_validation import validate_schedule_fields

        validate_schedule_fields(
            recurrence=self.recurrence,
            time_of_day=self.time_of_day,
            timezone_name=self.timezone,
            days_of_week=self.formatted_days_of_week,
            start_date=self.start_date,
            end_date=self.end_date,
        )
