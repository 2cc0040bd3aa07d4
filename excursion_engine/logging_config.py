"""Shared logger setup for the excursion engine."""
from __future__ import annotations

import logging
import os


def get_logger(name: str) -> logging.Logger:
    """Return a module logger writing ``[LEVEL] name: message`` lines.

    The level comes from ``EXCURSION_ENGINE_LOG_LEVEL`` (default ``INFO``).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
    level = os.getenv("EXCURSION_ENGINE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    return logger
