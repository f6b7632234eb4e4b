"""
Database initialization module.
"""

import logging

from sqlalchemy import inspect

from .models import db

logger = logging.getLogger(__name__)


def initialize_database(app):
    """Create any missing tables for the registered models."""
    inspector = inspect(db.engine)
    existing_tables = set(inspector.get_table_names())

    db.create_all()

    created = set(db.metadata.tables) - existing_tables
    if created:
        logger.info(f"Created database tables: {', '.join(sorted(created))}")
    else:
        logger.debug("All database tables already exist")
