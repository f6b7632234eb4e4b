"""
Opaque dose identifier encoding and decoding.

Format: "v1:" + base64url(payload) without padding, where payload is

    <byte length of schedule id>:<schedule id><ISO-8601 UTC instant>

The length prefix lets schedule ids contain any character, including
base64 specials and the separators used elsewhere.
"""

# Standard library imports
import base64
import binascii
import logging
import re
from datetime import datetime
from typing import Tuple

# Local application imports
from .errors import InvalidDoseIdError
from .timezone_manager import ensure_timezone_utc, format_instant

# Create a logger for this module
logger = logging.getLogger(__name__)

DOSE_ID_VERSION = "v1:"

_BASE64URL_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(encoded: str) -> bytes:
    if not _BASE64URL_PATTERN.match(encoded) or len(encoded) % 4 == 1:
        raise InvalidDoseIdError("DoseId payload is not valid base64url")
    padding = "=" * (-len(encoded) % 4)
    try:
        return base64.urlsafe_b64decode(encoded + padding)
    except (binascii.Error, ValueError):
        raise InvalidDoseIdError("DoseId payload is not valid base64url") from None


def encode_dose_id(schedule_id: str, scheduled_for: datetime) -> str:
    """
    Encode a dose key into an opaque dose id.

    Args:
        schedule_id: Non-empty schedule identifier
        scheduled_for: The dose instant; naive values are taken as UTC

    Returns:
        URL-safe dose id string
    """
    if not schedule_id:
        raise ValueError("schedule_id must not be empty")

    schedule_bytes = schedule_id.encode("utf-8")
    payload = (
        str(len(schedule_bytes)).encode("ascii")
        + b":"
        + schedule_bytes
        + format_instant(scheduled_for).encode("ascii")
    )
    return DOSE_ID_VERSION + _b64url_encode(payload)


def decode_dose_id(dose_id: str) -> Tuple[str, datetime]:
    """
    Decode a dose id back into (schedule_id, scheduled_for).

    Raises:
        InvalidDoseIdError: If the version tag is missing or unknown, or the
            payload does not decode into a schedule id and an instant, or is
            not the id encode_dose_id would produce for them
    """
    if not isinstance(dose_id, str) or not dose_id.startswith(DOSE_ID_VERSION):
        raise InvalidDoseIdError(f'DoseId must start with "{DOSE_ID_VERSION}"')

    encoded = dose_id[len(DOSE_ID_VERSION):]
    if not encoded:
        raise InvalidDoseIdError("DoseId is missing payload")

    payload = _b64url_decode(encoded)

    length_digits, separator, rest = payload.partition(b":")
    if not separator or not length_digits.isdigit():
        raise InvalidDoseIdError("Invalid doseId format")

    length = int(length_digits)
    schedule_bytes, instant_bytes = rest[:length], rest[length:]
    if length == 0 or len(schedule_bytes) != length or not instant_bytes:
        raise InvalidDoseIdError("Invalid doseId format")

    try:
        schedule_id = schedule_bytes.decode("utf-8")
        scheduled_for = datetime.fromisoformat(instant_bytes.decode("ascii"))
    except (UnicodeDecodeError, ValueError):
        raise InvalidDoseIdError("Invalid scheduledFor timestamp") from None

    if scheduled_for.tzinfo is None:
        raise InvalidDoseIdError("Invalid scheduledFor timestamp")

    scheduled_for = ensure_timezone_utc(scheduled_for)

    # Each dose has exactly one id, so padded lengths or other offsets are rejected
    if encode_dose_id(schedule_id, scheduled_for) != dose_id:
        raise InvalidDoseIdError("DoseId is not in canonical form")

    return schedule_id, scheduled_for
