# av1sweep/common/logging.py
from __future__ import annotations

import logging


def get_logger(name: str = "av1sweep", level: int | None = None) -> logging.Logger:
    """
    Return a named logger. If nothing configured logging yet,
    a basicConfig is installed once.
    """
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if level is not None:
        logger.setLevel(level)
    return logger


def configure_logging(level: str | int = "INFO") -> None:
    """Force the root level (used by the CLI for -v / LOG_LEVEL)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s", force=True)
