"""
Models package initialization.
Imports all models from submodules to make them available when importing from the models package.
"""

# Standard library imports
import logging

# Local application imports
from .base import db, new_id, utcnow
from .care_recipient import AccessStatus, CareRecipient, CaregiverAccess
from .medication import Medication
from .schedule import MedicationSchedule, RecurrenceType
from .dose_taken import DoseTaken

# Create a logger for this package
logger = logging.getLogger(__name__)

# Define what should be imported when using "from models import *"
__all__ = [
    "db",
    "new_id",
    "utcnow",
    "AccessStatus",
    "CareRecipient",
    "CaregiverAccess",
    "Medication",
    "MedicationSchedule",
    "RecurrenceType",
    "DoseTaken",
]
