"""
Route registration module for Flask blueprints.
"""

import logging

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """Register all application blueprints."""
    from .routes.doses import doses_bp

    app.register_blueprint(doses_bp)

    logger.info("All blueprints registered successfully")
