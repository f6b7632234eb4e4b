"""
Routes for computed doses.
"""

# Standard library imports
import logging
from datetime import datetime
from typing import Optional

# Third-party imports
from flask import Blueprint, current_app, jsonify, request

# Local application imports
from ..errors import ValidationError
from ..timezone_manager import ensure_timezone_utc

# Create a logger for this module
logger = logging.getLogger(__name__)

# Create a blueprint for dose routes
doses_bp = Blueprint("doses", __name__, url_prefix="/api/v1")

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"", "0", "false", "no", "off"}


def _current_user_id() -> Optional[str]:
    """The caller's user id, as forwarded by the identity provider."""
    return request.headers.get(current_app.config["USER_ID_HEADER"]) or None


def _unauthorized():
    return jsonify({"error": "Authentication required", "code": "UNAUTHORIZED"}), 401


def _parse_instant(name: str) -> Optional[datetime]:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return ensure_timezone_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        raise ValidationError(
            f"{name} must be an ISO-8601 timestamp", details={"field": name}
        ) from None


def _parse_flag(name: str) -> bool:
    raw = request.args.get(name, "").strip().lower()
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    raise ValidationError(f"{name} must be a boolean", details={"field": name})


@doses_bp.get("/recipients/<recipient_id>/doses")
def list_doses(recipient_id: str):
    """List upcoming doses for a care recipient."""
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    doses = current_app.dose_service.list_upcoming_doses(
        user_id,
        recipient_id,
        window_from=_parse_instant("from"),
        window_to=_parse_instant("to"),
        include_inactive=_parse_flag("includeInactive"),
    )
    return jsonify({"data": [dose.to_dict() for dose in doses]})


@doses_bp.post("/doses/<dose_id>/taken")
def mark_taken(dose_id: str):
    """Mark a dose as taken; repeating the call is harmless."""
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    dose = current_app.dose_service.mark_taken(user_id, dose_id)
    return jsonify({"data": dose.to_dict()})


@doses_bp.delete("/doses/<dose_id>/taken")
def unmark_taken(dose_id: str):
    user_id = _current_user_id()
    if user_id is None:
        return _unauthorized()

    removed = current_app.dose_service.unmark_taken(user_id, dose_id)
    return jsonify({"data": {"doseId": dose_id, "removed": removed}})
