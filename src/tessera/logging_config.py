from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOGGER_NAME = "tessera"
LOG_LEVEL_ENV = "TESSERA_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def resolve_level(default_level: int, value: Optional[str] = None) -> int:
    """Level from ``TESSERA_LOG_LEVEL`` (name or number), else ``default_level``."""
    raw = os.getenv(LOG_LEVEL_ENV) if value is None else value
    if not raw:
        return default_level
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default_level


def configure_logging(default_level: int = logging.INFO) -> logging.Logger:
    """Attach one stderr handler to the ``tessera`` logger and set its level.

    Only the package logger is touched, so a host application's root logging
    setup is left alone. Calling this again just updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(resolve_level(default_level))
    return logger
