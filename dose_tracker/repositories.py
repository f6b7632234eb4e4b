"""
SQLAlchemy-backed collaborators for the dose service.

## Authorization model

Schedule and medication lookups take the requesting user's id and only
return rows for care recipients the user may see: recipients they own, or
recipients whose owner granted them approved caregiver access. Anything
else looks exactly like a missing row.

The taken-dose store trusts its caller. DoseService only hands it schedule
ids that came back from the scoped lookups, so it does not filter by user.
get_taken_map deliberately returns every taken record for those schedules,
which lets caregiver B see a dose that caregiver A marked.
"""

# Standard library imports
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

# Third-party imports
from sqlalchemy import and_, delete, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

# Local application imports
from .models import (
    AccessStatus,
    CareRecipient,
    CaregiverAccess,
    DoseTaken,
    Medication,
    MedicationSchedule,
    db,
)
from .timezone_manager import ensure_timezone_utc, format_instant

# Create a logger for this module
logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
UPSERT_DIALECTS = ("sqlite", "postgresql")


def dose_key(schedule_id: str, scheduled_for: datetime) -> str:
    """Lookup key for the taken map: "{schedule_id}|{ISO instant}"."""
    return f"{schedule_id}|{format_instant(scheduled_for)}"


def accessible_recipient_ids(user_id: str):
    """
    Select the ids of care recipients visible to a user.

    Returns:
        A SQLAlchemy select usable with in_()
    """
    approved_owner_ids = select(CaregiverAccess.recipient_user_id).where(
        CaregiverAccess.caregiver_user_id == user_id,
        CaregiverAccess.status == AccessStatus.APPROVED,
    )
    return select(CareRecipient.id).where(
        or_(
            CareRecipient.user_id == user_id,
            CareRecipient.created_by_user_id == user_id,
            CareRecipient.user_id.in_(approved_owner_ids),
        )
    )


def can_access_recipient(user_id: str, recipient_id: str) -> bool:
    """Capability check: may the user see this care recipient?"""
    stmt = accessible_recipient_ids(user_id).where(CareRecipient.id == recipient_id)
    return db.session.execute(stmt).first() is not None


class ScheduleRepository:
    """Schedule lookups scoped to what the requesting user may see."""

    def find_by_id(self, user_id: str, schedule_id: str) -> Optional[MedicationSchedule]:
        stmt = (
            select(MedicationSchedule)
            .join(Medication, MedicationSchedule.medication_id == Medication.id)
            .where(
                MedicationSchedule.id == schedule_id,
                Medication.recipient_id.in_(accessible_recipient_ids(user_id)),
            )
        )
        return db.session.execute(stmt).scalars().first()

    def list_by_recipient(self, user_id: str, recipient_id: str) -> List[MedicationSchedule]:
        """
        List all schedules across a recipient's medications.

        Returns:
            Schedules ordered by creation time, empty when unauthorized
        """
        stmt = (
            select(MedicationSchedule)
            .join(Medication, MedicationSchedule.medication_id == Medication.id)
            .where(
                Medication.recipient_id == recipient_id,
                Medication.recipient_id.in_(accessible_recipient_ids(user_id)),
            )
            .order_by(MedicationSchedule.created_at, MedicationSchedule.id)
        )
        return list(db.session.execute(stmt).scalars())


class MedicationRepository:
    """Medication lookups scoped to what the requesting user may see."""

    def find_by_id(self, user_id: str, medication_id: str) -> Optional[Medication]:
        stmt = select(Medication).where(
            Medication.id == medication_id,
            Medication.recipient_id.in_(accessible_recipient_ids(user_id)),
        )
        return db.session.execute(stmt).scalars().first()

    def list_by_recipient(
        self, user_id: str, recipient_id: str, include_inactive: bool = False
    ) -> List[Medication]:
        stmt = select(Medication).where(
            Medication.recipient_id == recipient_id,
            Medication.recipient_id.in_(accessible_recipient_ids(user_id)),
        )
        if not include_inactive:
            stmt = stmt.where(Medication.is_active.is_(True), Medication.inactive_at.is_(None))
        return list(db.session.execute(stmt.order_by(Medication.name)).scalars())


class DoseTakenRepository:
    """Ledger of taken doses, unique per (schedule_id, scheduled_for)."""

    def _find(self, schedule_id: str, scheduled_for: datetime) -> Optional[DoseTaken]:
        stmt = select(DoseTaken).where(
            DoseTaken.schedule_id == schedule_id,
            DoseTaken.scheduled_for == scheduled_for,
        )
        return db.session.execute(stmt).scalars().first()

    def mark_taken(
        self,
        user_id: str,
        schedule_id: str,
        medication_id: str,
        recipient_id: str,
        scheduled_for: datetime,
        taken_at: datetime,
    ) -> DoseTaken:
        """
        Record that a dose was taken.

        Idempotent: when the dose is already taken the existing row is
        returned unchanged, including its original taken_at and taker.
        The caller must already have checked access to the schedule.
        """
        scheduled_for = ensure_timezone_utc(scheduled_for)
        values = {
            "recipient_id": recipient_id,
            "medication_id": medication_id,
            "schedule_id": schedule_id,
            "scheduled_for": scheduled_for,
            "taken_at": ensure_timezone_utc(taken_at),
            "taken_by_user_id": user_id,
        }

        dialect = db.session.get_bind().dialect.name
        if dialect in UPSERT_DIALECTS:
            insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
            stmt = (
                insert(DoseTaken)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["schedule_id", "scheduled_for"])
            )
            db.session.execute(stmt)
        else:
            try:
                with db.session.begin_nested():
                    db.session.add(DoseTaken(**values))
                    db.session.flush()
            except IntegrityError:
                logger.debug(f"Dose {schedule_id} at {scheduled_for} already taken")

        db.session.commit()

        record = self._find(schedule_id, scheduled_for)
        if record is None:
            raise RuntimeError("DoseTaken idempotency lookup failed")
        return record

    def unmark_taken(self, user_id: str, schedule_id: str, scheduled_for: datetime) -> bool:
        """
        Delete the taken record for a dose.

        Returns:
            True if a record was deleted, False if none existed
        """
        stmt = delete(DoseTaken).where(
            DoseTaken.schedule_id == schedule_id,
            DoseTaken.scheduled_for == ensure_timezone_utc(scheduled_for),
        )
        result = db.session.execute(stmt)
        db.session.commit()
        return result.rowcount > 0

    def get_taken_map(
        self,
        user_id: str,
        schedule_ids: Iterable[str],
        window_from: datetime,
        window_to: datetime,
    ) -> Dict[str, dict]:
        """
        Get taken records for schedules within [window_from, window_to).

        user_id is not used for filtering; schedule_ids must already be
        authorized by the caller.

        Returns:
            Map from dose_key() to {"taken_at", "taken_by_user_id"}
        """
        schedule_ids = list(schedule_ids)
        if not schedule_ids:
            return {}

        stmt = select(DoseTaken).where(
            and_(
                DoseTaken.schedule_id.in_(schedule_ids),
                DoseTaken.scheduled_for >= ensure_timezone_utc(window_from),
                DoseTaken.scheduled_for < ensure_timezone_utc(window_to),
            )
        )

        taken_map = {}
        for row in db.session.execute(stmt).scalars():
            taken_map[dose_key(row.schedule_id, row.scheduled_for)] = {
                "taken_at": row.taken_at_utc,
                "taken_by_user_id": row.taken_by_user_id,
            }
        return taken_map
