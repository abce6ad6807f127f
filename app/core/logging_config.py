"""Logging configuration for the application."""

import logging
import sys

from app.core.config import LOG_LEVEL

_HANDLER_NAME = "dev_events_console"


def setup_logging(level: str | None = None) -> None:
    """Configure logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel((level or LOG_LEVEL).upper())

    # Only install the console handler once (reloads, test sessions)
    if any(h.get_name() == _HANDLER_NAME for h in root_logger.handlers):
        return

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Set higher log levels for noisy components
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('cloudinary').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
