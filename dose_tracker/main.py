"""
Main application module for the Dose Tracker application.
"""

# Standard library imports
import logging
import os
from typing import Any, Dict, Optional

# Third-party imports
from flask import Flask, jsonify, request

# Local application imports
from .database_init import initialize_database
from .dose_service import DEFAULT_WINDOW_DAYS, DoseService
from .errors import ConflictError, DomainError, NotFoundError, ValidationError
from .logging_config import configure_logging
from .models import db
from .repositories import DoseTakenRepository, MedicationRepository, ScheduleRepository
from .route_registration import register_blueprints
from .timezone_manager import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def status_for_error(error: DomainError) -> int:
    """Map a domain error family to an HTTP status code."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, ConflictError):
        return 409
    return 500


def create_app(test_config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Factory function to create and configure the Flask application.

    Args:
        test_config: Optional configuration dictionary for testing

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # In Docker, use /app/data; locally use app.root_path/data
    if os.path.exists("/app/data"):
        data_dir = "/app/data"
    else:
        data_dir = os.path.join(app.root_path, "data")

    # Default configuration
    app.config.update(
        SECRET_KEY=os.environ.get("SECRET_KEY", "dev"),
        SQLALCHEMY_DATABASE_URI=os.environ.get(
            "DATABASE_URL", f"sqlite:///{os.path.join(data_dir, 'dose_tracker.db')}"
        ),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        LOG_LEVEL=os.environ.get("LOG_LEVEL", "INFO"),
        LOG_TO_FILE=os.environ.get("LOG_TO_FILE", "true").lower() != "false",
        DEFAULT_TIMEZONE=os.environ.get("DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
        DOSE_WINDOW_DAYS=int(os.environ.get("DOSE_WINDOW_DAYS", DEFAULT_WINDOW_DAYS)),
        USER_ID_HEADER=os.environ.get("USER_ID_HEADER", "X-User-Id"),
    )

    # Override config with test config if provided
    if test_config:
        app.config.update(test_config)

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///" + data_dir):
        os.makedirs(data_dir, exist_ok=True)

    configure_logging(app)

    # Initialize database
    db.init_app(app)
    app.db = db

    with app.app_context():
        initialize_database(app)

    app.dose_service = DoseService(
        ScheduleRepository(),
        MedicationRepository(),
        DoseTakenRepository(),
        default_timezone=app.config["DEFAULT_TIMEZONE"],
        window_days=app.config["DOSE_WINDOW_DAYS"],
    )

    register_blueprints(app)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        """Serialize domain errors as JSON with their family's status."""
        status = status_for_error(error)
        if status >= 500:
            logger.error(f"Unhandled domain error on {request.path}: {error}")
        return jsonify(error.to_dict()), status

    @app.errorhandler(404)
    def page_not_found(e):
        logger.warning(f"Page not found: {request.path}")
        return jsonify({"error": "Not found", "code": "NOT_FOUND"}), 404

    return app


# Application entry point for development
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 8087))
    logger.info(f"Starting Dose Tracker on port {port}")
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") == "development")
