from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from core.settings import LOGGING


def get_logger(name: str) -> logging.Logger:
    """Return a ``planner.*`` logger writing to the rotating application log."""

    full_name = name if name.startswith("planner") else f"planner.{name}"
    logger = logging.getLogger(full_name)
    if not logger.handlers:
        LOGGING.log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            LOGGING.log_path,
            maxBytes=LOGGING.max_bytes,
            backupCount=LOGGING.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(LOGGING.level)
    return logger


__all__ = ["get_logger"]
