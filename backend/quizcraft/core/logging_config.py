"""Logging configuration (done once, before the services start logging)."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
LOG_FILENAME = "quizcraft.log"

# Quieten noisy third-party loggers
_NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")

_installed_handlers: list = []


def setup_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Install stdout + rotating-file handlers on the root logger.

    ``log_dir`` and ``level`` default to ``LOG_DIR`` and ``LOG_LEVEL`` from the
    settings (``DEBUG=true`` forces the DEBUG level).

    Calling it again is a no-op, so entry points and tests can both call it.
    Returns the ``quizcraft`` logger.
    """
    if _installed_handlers:
        return logging.getLogger("quizcraft")

    if log_dir is None or level is None:
        from quizcraft.core.config import get_settings
        settings = get_settings()
        if log_dir is None:
            log_dir = settings.LOG_DIR
        if level is None:
            level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL
    os.makedirs(log_dir, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(fmt)
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, LOG_FILENAME), maxBytes=10 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)

    root = logging.getLogger()
    numeric = logging.getLevelName(level.upper())
    root.setLevel(numeric if isinstance(numeric, int) else logging.INFO)
    for handler in (stream_handler, file_handler):
        root.addHandler(handler)
        _installed_handlers.append(handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger("quizcraft")


def reset_logging() -> None:
    """Remove the handlers installed by ``setup_logging`` (used by tests)."""
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
