"""
Dose service: computed doses and taken tracking.

Dose occurrences are generated on the fly from schedule recurrence rules
instead of being stored. Only "taken" events are persisted, keyed by
(schedule_id, scheduled_for), and clients refer to a dose through the opaque
id produced by dose_id.encode_dose_id().

Authorization lives in the schedule and medication repositories. The taken
store is only ever queried with schedule ids those repositories returned.
"""

# Standard library imports
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

# Local application imports
from .dose_id import decode_dose_id, encode_dose_id
from .dose_occurrence import DoseOccurrence, DoseStatus
from .errors import (
    DoseNotFoundError,
    InactiveMedicationError,
    InvalidWindowError,
    MedicationNotFoundError,
)
from .models import Medication, MedicationSchedule, utcnow
from .recurrence import generate_occurrences
from .repositories import dose_key
from .timezone_manager import DEFAULT_TIMEZONE, ensure_timezone_utc

# Create a logger for this module
logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7


def _build_occurrence(
    schedule: MedicationSchedule,
    medication: Medication,
    scheduled_for: datetime,
    dose_id: Optional[str] = None,
) -> DoseOccurrence:
    return DoseOccurrence(
        dose_id=dose_id or encode_dose_id(schedule.id, scheduled_for),
        schedule_id=schedule.id,
        medication_id=medication.id,
        recipient_id=medication.recipient_id,
        medication_name=medication.name,
        instructions=medication.instructions,
        dosage_notes=schedule.dosage_notes,
        scheduled_for=scheduled_for,
        time_of_day=schedule.time_of_day,
        recurrence=getattr(schedule.recurrence, "value", schedule.recurrence),
        days_of_week=schedule.formatted_days_of_week,
    )


class DoseService:
    """
    Lists dose occurrences for a care recipient and records taken doses.

    Args:
        schedule_repo: Scoped schedule lookups
        medication_repo: Scoped medication lookups
        dose_taken_repo: Taken-dose ledger
        now: Clock returning an aware UTC datetime, for tests
        default_timezone: Zone for schedules that carry none
        window_days: Length of the default listing window
    """

    def __init__(
        self,
        schedule_repo,
        medication_repo,
        dose_taken_repo,
        now: Optional[Callable[[], datetime]] = None,
        default_timezone: str = DEFAULT_TIMEZONE,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ):
        self.schedule_repo = schedule_repo
        self.medication_repo = medication_repo
        self.dose_taken_repo = dose_taken_repo
        self.now = now or utcnow
        self.default_timezone = default_timezone
        self.window_days = window_days

    def list_upcoming_doses(
        self,
        user_id: str,
        recipient_id: str,
        window_from: Optional[datetime] = None,
        window_to: Optional[datetime] = None,
        include_inactive: bool = False,
    ) -> List[DoseOccurrence]:
        """
        List dose occurrences for a care recipient within a window.

        Each occurrence carries its medication details, taken status from the
        ledger, and an opaque dose id. Doses of a deactivated medication that
        fall after its inactive_at are never returned.

        Args:
            user_id: The requesting user
            recipient_id: The care recipient
            window_from: Window start, inclusive (default: now)
            window_to: Window end, exclusive (default: window_from + 7 days)
            include_inactive: Include doses of inactive medications

        Returns:
            Occurrences sorted by scheduled_for

        Raises:
            InvalidWindowError: If window_from > window_to
        """
        window_from = ensure_timezone_utc(window_from or self.now())
        window_to = (
            ensure_timezone_utc(window_to)
            if window_to
            else window_from + timedelta(days=self.window_days)
        )
        if window_from > window_to:
            raise InvalidWindowError()

        schedules = self.schedule_repo.list_by_recipient(user_id, recipient_id)
        # All medications are fetched so lifecycle state can be checked per schedule
        medications = self.medication_repo.list_by_recipient(
            user_id, recipient_id, include_inactive=True
        )

        medication_by_id = {medication.id: medication for medication in medications}

        candidates = []
        for schedule in schedules:
            medication = medication_by_id.get(schedule.medication_id)
            if medication is None:
                # Orphaned schedule, its medication vanished underneath us
                logger.debug(f"Skipping orphaned schedule {schedule.id}")
                continue
            if medication.is_inactive and not include_inactive:
                continue

            for scheduled_for in generate_occurrences(
                schedule, window_from, window_to, self.default_timezone
            ):
                if medication.allows_dose_at(scheduled_for):
                    candidates.append((schedule, medication, scheduled_for))

        if not candidates:
            return []

        schedule_ids = sorted({schedule.id for schedule, _, _ in candidates})
        taken_map = self.dose_taken_repo.get_taken_map(
            user_id, schedule_ids, window_from, window_to
        )

        occurrences = []
        for schedule, medication, scheduled_for in candidates:
            occurrence = _build_occurrence(schedule, medication, scheduled_for)
            taken = taken_map.get(dose_key(schedule.id, scheduled_for))
            if taken:
                occurrence.status = DoseStatus.TAKEN
                occurrence.taken_at = ensure_timezone_utc(taken["taken_at"])
                occurrence.taken_by_user_id = taken["taken_by_user_id"]
            occurrences.append(occurrence)

        occurrences.sort(key=lambda occurrence: occurrence.scheduled_for)
        logger.debug(
            f"Listed {len(occurrences)} doses for recipient {recipient_id} "
            f"in [{window_from.isoformat()}, {window_to.isoformat()})"
        )
        return occurrences

    def _resolve(self, user_id: str, dose_id: str):
        schedule_id, scheduled_for = decode_dose_id(dose_id)

        schedule = self.schedule_repo.find_by_id(user_id, schedule_id)
        if schedule is None:
            raise DoseNotFoundError(dose_id)

        medication = self.medication_repo.find_by_id(user_id, schedule.medication_id)
        if medication is None:
            raise MedicationNotFoundError(schedule.medication_id)

        return schedule, medication, scheduled_for

    def mark_taken(self, user_id: str, dose_id: str) -> DoseOccurrence:
        """
        Mark a dose as taken by the requesting user.

        Idempotent: marking an already-taken dose returns the existing record.
        Past doses may be marked retroactively.

        Raises:
            InvalidDoseIdError: If the dose id cannot be decoded
            DoseNotFoundError: If the schedule is missing or not visible
            MedicationNotFoundError: If the schedule's medication is missing
            InactiveMedicationError: If the dose falls after the medication's
                inactive_at
        """
        schedule, medication, scheduled_for = self._resolve(user_id, dose_id)

        if not medication.allows_dose_at(scheduled_for):
            raise InactiveMedicationError(medication.id)

        record = self.dose_taken_repo.mark_taken(
            user_id,
            schedule_id=schedule.id,
            medication_id=medication.id,
            recipient_id=medication.recipient_id,
            scheduled_for=scheduled_for,
            taken_at=self.now(),
        )
        logger.info(f"Dose {schedule.id} at {scheduled_for.isoformat()} marked taken")

        occurrence = _build_occurrence(schedule, medication, scheduled_for, dose_id)
        occurrence.status = DoseStatus.TAKEN
        occurrence.taken_at = ensure_timezone_utc(record.taken_at)
        occurrence.taken_by_user_id = record.taken_by_user_id
        return occurrence

    def unmark_taken(self, user_id: str, dose_id: str) -> bool:
        """
        Return a taken dose to the scheduled state.

        Returns:
            True if a taken record was removed, False if the dose was not taken
        """
        schedule, _, scheduled_for = self._resolve(user_id, dose_id)
        removed = self.dose_taken_repo.unmark_taken(user_id, schedule.id, scheduled_for)
        if removed:
            logger.info(f"Dose {schedule.id} at {scheduled_for.isoformat()} unmarked")
        return removed
