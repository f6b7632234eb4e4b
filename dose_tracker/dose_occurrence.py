"""
Computed dose occurrence type.

Occurrences are never stored. They are generated from schedules and merged
with DoseTaken rows on every read.
"""

# Standard library imports
from dataclasses import dataclass
from datetime import datetime
import enum
from typing import List, Optional


class DoseStatus(enum.Enum):
    SCHEDULED = "scheduled"
    TAKEN = "taken"


@dataclass
class DoseOccurrence:
    """A single computed dose of a medication."""

    dose_id: str
    schedule_id: str
    medication_id: str
    recipient_id: str
    medication_name: str
    instructions: Optional[str]
    dosage_notes: Optional[str]
    scheduled_for: datetime
    time_of_day: str
    recurrence: str
    days_of_week: Optional[List[int]]
    status: DoseStatus = DoseStatus.SCHEDULED
    taken_at: Optional[datetime] = None
    taken_by_user_id: Optional[str] = None

    @property
    def is_taken(self) -> bool:
        return self.status == DoseStatus.TAKEN

    def to_dict(self) -> dict:
        """Convert occurrence to dictionary for JSON response."""
        return {
            "doseId": self.dose_id,
            "scheduleId": self.schedule_id,
            "medicationId": self.medication_id,
            "recipientId": self.recipient_id,
            "medicationName": self.medication_name,
            "instructions": self.instructions,
            "dosageNotes": self.dosage_notes,
            "scheduledFor": self.scheduled_for.isoformat(),
            "timeOfDay": self.time_of_day,
            "recurrence": self.recurrence,
            "daysOfWeek": self.days_of_week,
            "status": self.status.value,
            "takenAt": self.taken_at.isoformat() if self.taken_at else None,
            "takenByUserId": self.taken_by_user_id,
        }
