"""Loguru sink configuration shared by the API and the CLI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from config import get_settings

LOG_FORMAT = "<dim>{time:YYYY-MM-DD HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} - {message}"


def configure_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        level: Override for settings.log_level
        log_file: Override for settings.log_file (rotating file sink)
    """
    settings = get_settings()
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            rotation=settings.log_rotation,
            encoding="utf-8",
        )
