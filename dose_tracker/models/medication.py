"""
This module defines the medication model.
"""

# Standard library imports
from datetime import datetime
import logging
from typing import List, Optional, TYPE_CHECKING

# Third-party imports
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from .base import db, new_id, utcnow
from ..timezone_manager import ensure_timezone_utc

if TYPE_CHECKING:
    from .care_recipient import CareRecipient
    from .schedule import MedicationSchedule

# Create a logger for this module
logger = logging.getLogger(__name__)


class Medication(db.Model):
    """
    Model representing a medication taken by a care recipient.

    Medications are never deleted. Deactivation stamps inactive_at so that
    doses scheduled up to that instant stay visible and markable.
    """

    __tablename__ = "medications"
    __table_args__ = (Index("ix_medications_recipient_active", "recipient_id", "is_active"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipient_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("care_recipients.id", ondelete="CASCADE"), nullable=False
    )
    created_by_user_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    inactive_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    recipient: Mapped["CareRecipient"] = relationship(
        "CareRecipient", back_populates="medications"
    )
    schedules: Mapped[List["MedicationSchedule"]] = relationship(
        "MedicationSchedule", back_populates="medication", cascade="all, delete-orphan"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<Medication {self.id} {self.name}>"

    @property
    def is_inactive(self) -> bool:
        """True once the medication has been deactivated."""
        return self.is_active is False or self.inactive_at is not None

    @property
    def inactive_cutoff(self) -> Optional[datetime]:
        """The deactivation instant in UTC, or None while active."""
        if self.inactive_at is None:
            return None
        return ensure_timezone_utc(self.inactive_at)

    def allows_dose_at(self, scheduled_for: datetime) -> bool:
        """
        Whether a dose at this instant is visible and markable.

        Doses exactly at the cutoff remain allowed.
        """
        cutoff = self.inactive_cutoff
        if cutoff is None:
            return True
        return ensure_timezone_utc(scheduled_for) <= cutoff

    def deactivate(self, at: Optional[datetime] = None) -> None:
        """Mark the medication inactive, stamping the cutoff instant."""
        if self.is_active is False and self.inactive_at is not None:
            return
        self.is_active = False
        self.inactive_at = ensure_timezone_utc(at) if at else utcnow()
        logger.info(f"Medication {self.id} deactivated at {self.inactive_at.isoformat()}")

    def reactivate(self) -> None:
        """Mark the medication active again and clear the cutoff."""
        self.is_active = True
        self.inactive_at = None
        logger.info(f"Medication {self.id} reactivated")
