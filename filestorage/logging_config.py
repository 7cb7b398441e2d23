"""
Logging configuration.

All modules log under the ``filestorage`` logger. Wrapped adapter failures
are logged at DEBUG level before being raised to the caller, so setting
``STORAGE_LOG_LEVEL=DEBUG`` shows the original backend errors.
"""
import logging
import sys

from filestorage.config import settings


def setup_logging() -> logging.Logger:
    """
    Configure and return the library logger.

    The logger outputs to stdout with a structured format including:
    - Timestamp
    - Logger name
    - Log level
    - Message

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger("filestorage")
    level = logging.getLevelName(settings.STORAGE_LOG_LEVEL.upper())
    logger.setLevel(level if isinstance(level, int) else logging.INFO)

    # Prevent duplicate handlers if called multiple times
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
