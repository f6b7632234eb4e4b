"""
Logging configuration for the Dose Tracker application.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from typing import Any


def configure_logging(app_instance: Any) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        app_instance: The Flask application instance

    Returns:
        The configured root logger
    """
    # Get log level from config or environment, default to INFO
    log_level_name = app_instance.config.get(
        "LOG_LEVEL", os.environ.get("LOG_LEVEL", "INFO")
    )
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear any existing handlers to avoid duplicates when reloading in debug mode
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    verbose_formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s in %(module)s [%(pathname)s:%(lineno)d]: %(message)s"
    )
    simple_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    error_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s (%(module)s:%(lineno)d): %(message)s"
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if app_instance.config.get("LOG_TO_FILE", True):
        logs_dir = os.path.join(app_instance.root_path, "logs")
        os.makedirs(logs_dir, exist_ok=True)

        # (file name, level, formatter, backups), each rotated at 10MB
        handler_specs = [
            ("dose_tracker.log", log_level, verbose_formatter, 10),
            ("errors.log", logging.ERROR, error_formatter, 5),
        ]
        # DST adjustments and per-window counts are logged at DEBUG
        if log_level <= logging.DEBUG:
            handler_specs.append(("debug.log", logging.DEBUG, verbose_formatter, 3))

        for file_name, level, formatter, backups in handler_specs:
            file_handler = RotatingFileHandler(
                os.path.join(logs_dir, file_name), maxBytes=10485760, backupCount=backups
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        app_instance.logger.info(f"Logging to files in {logs_dir}")

    # SQLAlchemy engine logging is far too chatty below WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    app_instance.logger.setLevel(log_level)
    app_instance.logger.info(
        f"Dose Tracker application starting with log level: {log_level_name}"
    )

    return root_logger
