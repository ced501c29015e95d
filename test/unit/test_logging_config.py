"""
Unit tests for backend/quizcraft/core/logging_config.py
Tests: handler installation, idempotence, log file creation, reset,
level and directory taken from settings
"""

import sys
import os
import logging
import logging.handlers
from types import SimpleNamespace
from unittest.mock import patch

BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", "backend"))
sys.path.insert(0, BACKEND_DIR)

from quizcraft.core.logging_config import LOG_FILENAME, reset_logging, setup_logging


def _installed(kind):
    return [h for h in logging.getLogger().handlers if isinstance(h, kind)]


def test_setup_installs_stream_and_file_handlers(tmp_path, clean_logging):
    logger = setup_logging(log_dir=str(tmp_path), level="DEBUG")
    assert logger.name == "quizcraft"
    files = _installed(logging.handlers.RotatingFileHandler)
    assert len(files) == 1
    assert files[0].maxBytes == 10 * 1024 * 1024
    assert files[0].backupCount == 3
    assert logging.getLogger().level == logging.DEBUG


def test_setup_is_idempotent(tmp_path, clean_logging):
    setup_logging(log_dir=str(tmp_path))
    before = len(logging.getLogger().handlers)
    setup_logging(log_dir=str(tmp_path))
    assert len(logging.getLogger().handlers) == before


def test_messages_reach_log_file(tmp_path, clean_logging):
    setup_logging(log_dir=str(tmp_path), level="INFO")
    logging.getLogger("quizcraft.test").info("quiz generated")
    for handler in _installed(logging.handlers.RotatingFileHandler):
        handler.flush()
    content = (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")
    assert "quizcraft.test INFO quiz generated" in content


def test_noisy_loggers_quietened(tmp_path, clean_logging):
    setup_logging(log_dir=str(tmp_path))
    assert logging.getLogger("httpx").level == logging.WARNING


def test_reset_removes_handlers(tmp_path, clean_logging):
    setup_logging(log_dir=str(tmp_path))
    reset_logging()
    assert _installed(logging.handlers.RotatingFileHandler) == []


def _fake_settings(tmp_path, **kw):
    values = {"LOG_DIR": str(tmp_path), "LOG_LEVEL": "INFO", "DEBUG": False}
    values.update(kw)
    return SimpleNamespace(**values)


def test_level_and_dir_default_to_settings(tmp_path, clean_logging):
    with patch("quizcraft.core.config.get_settings", return_value=_fake_settings(tmp_path, LOG_LEVEL="WARNING")):
        setup_logging()
    assert logging.getLogger().level == logging.WARNING
    assert (tmp_path / LOG_FILENAME).exists()


def test_debug_flag_forces_debug_level(tmp_path, clean_logging):
    with patch("quizcraft.core.config.get_settings", return_value=_fake_settings(tmp_path, DEBUG=True)):
        setup_logging()
    assert logging.getLogger().level == logging.DEBUG
