"""
This module defines care recipient and caregiver access models.

A care recipient is a user who takes medications. Caregivers gain access to
a recipient's medications through an approved CaregiverAccess row.
"""

# Standard library imports
from datetime import datetime
import enum
import logging
from typing import List, Optional, TYPE_CHECKING

# Third-party imports
from sqlalchemy import DateTime, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Local application imports
from .base import db, new_id, utcnow
from ..timezone_manager import DEFAULT_TIMEZONE

if TYPE_CHECKING:
    from .medication import Medication

# Create a logger for this module
logger = logging.getLogger(__name__)


class AccessStatus(enum.Enum):
    """Enum for the states of a caregiver access relationship."""

    PENDING_REQUEST = "pending_request"  # Caregiver asked, recipient must approve
    PENDING_INVITE = "pending_invite"  # Recipient invited, caregiver must accept
    APPROVED = "approved"
    REVOKED = "revoked"


class CareRecipient(db.Model):
    """
    Model representing the person whose medications are tracked.
    """

    __tablename__ = "care_recipients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # The user who owns this profile
    user_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )

    # Legacy owner column for profiles created by a caregiver
    created_by_user_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, index=True
    )

    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default=DEFAULT_TIMEZONE
    )

    medications: Mapped[List["Medication"]] = relationship(
        "Medication", back_populates="recipient", cascade="all, delete-orphan"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    def __repr__(self) -> str:
        return f"<CareRecipient {self.id} {self.display_name}>"


class CaregiverAccess(db.Model):
    """
    Model representing a caregiver's access to a recipient user.
    """

    __tablename__ = "caregiver_access"
    __table_args__ = (
        Index("ix_caregiver_access_pair", "caregiver_user_id", "recipient_user_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    caregiver_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[AccessStatus] = mapped_column(Enum(AccessStatus), nullable=False)

    requested_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    revoked_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<CaregiverAccess {self.caregiver_user_id} -> "
            f"{self.recipient_user_id} ({self.status.value})>"
        )
