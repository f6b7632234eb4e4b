"""
Domain errors raised by the dose tracking core.

All errors are expected, caller-recoverable conditions. The core raises them
without logging; the JSON layer maps each family to an HTTP status.
"""

# Standard library imports
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all domain errors, carrying a machine-readable code."""

    code = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        payload = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} {identifier} not found",
            details={"resource": resource, "identifier": identifier},
        )


class ConflictError(DomainError):
    code = "CONFLICT"


class InvalidWindowError(ValidationError):
    """Raised when a time window has inverted bounds (from > to)."""

    code = "INVALID_WINDOW"

    def __init__(self, message: str = "Window start must be before end"):
        super().__init__(message)


class InvalidDoseIdError(ValidationError):
    code = "INVALID_DOSE_ID"


class ScheduleValidationError(ValidationError):
    code = "INVALID_SCHEDULE"


class DoseNotFoundError(NotFoundError):
    code = "DOSE_NOT_FOUND"

    # Covers both a missing schedule and one the caller may not see.
    def __init__(self, dose_id: str):
        super().__init__("DoseOccurrence", dose_id)


class MedicationNotFoundError(NotFoundError):
    code = "MEDICATION_NOT_FOUND"

    def __init__(self, medication_id: str):
        super().__init__("Medication", medication_id)


class InactiveMedicationError(ConflictError):
    code = "INACTIVE_MEDICATION"

    def __init__(self, medication_id: str):
        super().__init__(
            f"Medication {medication_id} is inactive",
            details={"medication_id": medication_id},
        )
