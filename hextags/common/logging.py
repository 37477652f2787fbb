# hextags/common/logging.py
from __future__ import annotations

import logging
from typing import Optional

from hextags.common.settings import get_settings


def get_logger(name: str = "hextags", level: Optional[int] = None) -> logging.Logger:
    """
    Return a named logger for the tagging core.
    If the host application has not configured logging, we add a basicConfig once.
    Level defaults to the configured LOG_LEVEL.
    """
    if level is None:
        level = logging.getLevelName(get_settings().log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers and not logger.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.setLevel(level)
    return logger
