"""
Dose Tracker: computed medication doses and taken tracking.
"""

from .dose_id import decode_dose_id, encode_dose_id
from .dose_service import DoseService
from .recurrence import generate_occurrences

__all__ = ["DoseService", "decode_dose_id", "encode_dose_id", "generate_occurrences"]
