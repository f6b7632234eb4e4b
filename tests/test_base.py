"""
Base test class for database-backed tests in the Dose Tracker application.

This module provides a BaseTestCase class that handles:
1. Creating the app against an in-memory SQLite database
2. Managing the Flask app context
3. Building recipients, medications and schedules for tests

All database-backed test classes should inherit from this base class.
"""

# Standard library imports
import logging
import unittest
from datetime import date, datetime, timezone

logger = logging.getLogger("test_base")

OWNER_ID = "user_owner"
CAREGIVER_ID = "user_caregiver"
STRANGER_ID = "user_stranger"


class BaseTestCase(unittest.TestCase):
    """Base test class for all database-backed tests."""

    @classmethod
    def setUpClass(cls):
        """Set up the test class with a shared app context."""
        from dose_tracker.main import create_app

        cls.app = create_app(
            {
                "TESTING": True,
                "LOG_TO_FILE": False,
                "LOG_LEVEL": "DEBUG",
                "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            }
        )

        cls.app_context = cls.app.app_context()
        cls.app_context.push()

        cls.db = cls.app.db
        cls.db.create_all()

    @classmethod
    def tearDownClass(cls):
        """Clean up the test class."""
        cls.db.session.remove()
        cls.db.drop_all()
        cls.app_context.pop()

    def setUp(self):
        """Start every test from empty tables."""
        from dose_tracker.models import (
            CareRecipient,
            CaregiverAccess,
            DoseTaken,
            Medication,
            MedicationSchedule,
        )

        for model in (DoseTaken, MedicationSchedule, Medication, CaregiverAccess, CareRecipient):
            self.db.session.execute(self.db.delete(model))
        self.db.session.commit()

        self.now = datetime.now(timezone.utc)

    def tearDown(self):
        """Clean up after each test."""
        self.db.session.rollback()
        self.db.session.remove()

    def create_recipient(self, user_id=OWNER_ID, display_name="Ada"):
        from dose_tracker.models import CareRecipient

        recipient = CareRecipient(user_id=user_id, display_name=display_name)
        self.db.session.add(recipient)
        self.db.session.commit()
        return recipient

    def create_medication(self, recipient, name="Metformin", instructions="With food"):
        from dose_tracker.models import Medication

        medication = Medication(
            recipient_id=recipient.id,
            name=name,
            instructions=instructions,
            created_by_user_id=recipient.user_id,
        )
        self.db.session.add(medication)
        self.db.session.commit()
        return medication

    def create_schedule(self, medication, **overrides):
        from dose_tracker.models import MedicationSchedule, RecurrenceType

        fields = {
            "medication_id": medication.id,
            "recurrence": RecurrenceType.DAILY,
            "time_of_day": "08:00",
            "timezone": "UTC",
            "start_date": date(2024, 12, 1),
        }
        fields.update(overrides)
        schedule = MedicationSchedule(**fields)
        self.db.session.add(schedule)
        self.db.session.commit()
        return schedule

    def grant_access(self, caregiver_id=CAREGIVER_ID, recipient_user_id=OWNER_ID, status=None):
        from dose_tracker.models import AccessStatus, CaregiverAccess

        access = CaregiverAccess(
            caregiver_user_id=caregiver_id,
            recipient_user_id=recipient_user_id,
            status=status or AccessStatus.APPROVED,
        )
        self.db.session.add(access)
        self.db.session.commit()
        return access
