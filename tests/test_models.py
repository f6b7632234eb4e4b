"""
Tests for model behavior that does not need a database round trip.
"""

# Standard library imports
import unittest
from datetime import date, datetime, timedelta, timezone

# Local application imports
from dose_tracker.errors import ScheduleValidationError
from dose_tracker.models import Medication, MedicationSchedule, RecurrenceType
from dose_tracker.models.schedule import decode_days_of_week

from .test_base import BaseTestCase


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestMedicationLifecycle(unittest.TestCase):

    def setUp(self):
        self.medication = Medication(id="med-1", name="Metformin", is_active=True)

    def test_active_medication_allows_any_dose(self):
        self.assertFalse(self.medication.is_inactive)
        self.assertIsNone(self.medication.inactive_cutoff)
        self.assertTrue(self.medication.allows_dose_at(utc(2099, 1, 1)))

    def test_deactivate_sets_cutoff(self):
        cutoff = utc(2024, 12, 3, 8)
        self.medication.deactivate(cutoff)

        self.assertTrue(self.medication.is_inactive)
        self.assertFalse(self.medication.is_active)
        self.assertTrue(self.medication.allows_dose_at(cutoff))
        self.assertTrue(self.medication.allows_dose_at(cutoff - timedelta(minutes=1)))
        self.assertFalse(self.medication.allows_dose_at(cutoff + timedelta(minutes=1)))

    def test_deactivate_twice_keeps_first_cutoff(self):
        self.medication.deactivate(utc(2024, 12, 3))
        self.medication.deactivate(utc(2024, 12, 10))

        self.assertEqual(self.medication.inactive_cutoff, utc(2024, 12, 3))

    def test_naive_cutoff_is_treated_as_utc(self):
        self.medication.inactive_at = datetime(2024, 12, 3, 8)

        self.assertEqual(self.medication.inactive_cutoff, utc(2024, 12, 3, 8))

    def test_reactivate_clears_cutoff(self):
        self.medication.deactivate(utc(2024, 12, 3))
        self.medication.reactivate()

        self.assertFalse(self.medication.is_inactive)
        self.assertTrue(self.medication.allows_dose_at(utc(2024, 12, 10)))


class TestScheduleModel(unittest.TestCase):

    def make_schedule(self, **overrides):
        fields = {
            "id": "sched-1",
            "recurrence": RecurrenceType.WEEKLY,
            "time_of_day": "08:00",
            "timezone": "UTC",
            "days_of_week": [1, 3],
            "start_date": date(2024, 12, 1),
        }
        fields.update(overrides)
        return MedicationSchedule(**fields)

    def test_formatted_days_of_week(self):
        self.assertEqual(self.make_schedule().formatted_days_of_week, [1, 3])
        self.assertEqual(self.make_schedule(days_of_week="[2, 4]").formatted_days_of_week, [2, 4])
        self.assertIsNone(self.make_schedule(days_of_week=None).formatted_days_of_week)

    def test_decode_days_of_week(self):
        self.assertEqual(decode_days_of_week("[1, 7]"), [1, 7])
        self.assertEqual(decode_days_of_week((2, 5)), [2, 5])
        self.assertIsNone(decode_days_of_week(None))

    def test_end_never_precedes_start(self):
        schedule = self.make_schedule()

        schedule.end(date(2024, 11, 1))
        self.assertEqual(schedule.end_date, date(2024, 12, 1))

        schedule.end(date(2024, 12, 15))
        self.assertEqual(schedule.end_date, date(2024, 12, 15))
        self.assertTrue(schedule.is_ended_by(date(2024, 12, 15)))
        self.assertFalse(schedule.is_ended_by(date(2024, 12, 14)))

    def test_validate(self):
        self.make_schedule().validate()

        with self.assertRaises(ScheduleValidationError):
            self.make_schedule(days_of_week=[]).validate()
        with self.assertRaises(ScheduleValidationError):
            self.make_schedule(recurrence=RecurrenceType.DAILY).validate()


class TestModelPersistence(BaseTestCase):
    """Round trips through the database."""

    def test_schedule_days_survive_storage(self):
        recipient = self.create_recipient()
        medication = self.create_medication(recipient)
        schedule = self.create_schedule(
            medication, recurrence=RecurrenceType.WEEKLY, days_of_week=[1, 4, 7]
        )
        schedule_id = schedule.id
        self.db.session.expunge_all()

        stored = self.db.session.get(MedicationSchedule, schedule_id)

        self.assertEqual(stored.formatted_days_of_week, [1, 4, 7])
        self.assertEqual(stored.recurrence, RecurrenceType.WEEKLY)
        self.assertEqual(stored.start_date, date(2024, 12, 1))

    def test_recipient_defaults(self):
        recipient = self.create_recipient()

        self.assertEqual(recipient.timezone, "America/New_York")
        self.assertEqual(len(recipient.id), 36)

    def test_deactivated_medication_cutoff_survives_storage(self):
        recipient = self.create_recipient()
        medication = self.create_medication(recipient)
        medication.deactivate(utc(2024, 12, 3, 8))
        self.db.session.commit()
        medication_id = medication.id
        self.db.session.expunge_all()

        stored = self.db.session.get(Medication, medication_id)

        self.assertFalse(stored.is_active)
        self.assertEqual(stored.inactive_cutoff, utc(2024, 12, 3, 8))
