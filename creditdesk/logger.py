"""Logging configuration for CreditDesk."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from creditdesk.config import LOG_DIR, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT

_logger: Optional[logging.Logger] = None


def setup_logger(log_dir: str = None) -> logging.Logger:
    """Setup the application logger with file and console handlers.

    Args:
        log_dir: Directory for the rotating log file. Defaults to LOG_DIR.

    Returns:
        The configured "creditdesk" logger.
    """
    global _logger

    logger = logging.getLogger("creditdesk")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    log_dir = log_dir or LOG_DIR
    try:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)
    except OSError as e:
        # Read-only home (CI, sandboxes): keep console logging only
        print(f"Warning: file logging disabled: {e}")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
    logger.addHandler(console_handler)

    _logger = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger for a module."""
    global _logger

    if _logger is None:
        _logger = setup_logger()

    # Module names already live under the "creditdesk" hierarchy
    if name == _logger.name or name.startswith(_logger.name + "."):
        return logging.getLogger(name)
    return _logger.getChild(name)
