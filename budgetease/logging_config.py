"""Centralized logging configuration for BudgetEase.

Logs go to the console and, when ``BUDGETEASE_LOG_DIR`` is set, to a
rotating file as well.

Usage:
    from budgetease.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Scheduling appointment", extra={'user_email': email})
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from .config import LOG_DIR, LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger.

    Handlers are attached once per logger name, so calling this at import
    time in several modules is safe.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logging.Logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if LOG_DIR:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, "budgetease.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
