"""
This module defines the persisted record of a taken dose.
"""

# Standard library imports
from datetime import datetime
import logging

# Third-party imports
from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

# Local application imports
from .base import db, new_id
from ..timezone_manager import ensure_timezone_utc

# Create a logger for this module
logger = logging.getLogger(__name__)


class DoseTaken(db.Model):
    """
    Model representing one completed dose occurrence.

    At most one row exists per (schedule_id, scheduled_for). Rows are never
    updated, only inserted by mark-taken and deleted by unmark-taken.
    """

    __tablename__ = "dose_taken"
    __table_args__ = (
        UniqueConstraint(
            "schedule_id", "scheduled_for", name="uq_dose_taken_schedule_scheduled_for"
        ),
        Index("ix_dose_taken_recipient_scheduled_for", "recipient_id", "scheduled_for"),
        Index("ix_dose_taken_medication_scheduled_for", "medication_id", "scheduled_for"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("care_recipients.id", ondelete="CASCADE"), nullable=False
    )
    medication_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("medications.id", ondelete="CASCADE"), nullable=False
    )
    schedule_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("medication_schedules.id", ondelete="CASCADE"), nullable=False
    )

    # Exact scheduled instant in UTC, not a date
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    taken_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    taken_by_user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<DoseTaken {self.schedule_id} at {self.scheduled_for}>"

    @property
    def scheduled_for_utc(self) -> datetime:
        return ensure_timezone_utc(self.scheduled_for)

    @property
    def taken_at_utc(self) -> datetime:
        return ensure_timezone_utc(self.taken_at)
