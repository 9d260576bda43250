from __future__ import annotations

import logging

import pytest

from device_console.logging_config import setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_level_names_are_case_insensitive(root_logger) -> None:
    setup_logging(" debug ")
    assert root_logger.level == logging.DEBUG


def test_unknown_level_name_falls_back_to_info(root_logger) -> None:
    setup_logging("chatty")
    assert root_logger.level == logging.INFO


def test_repeat_calls_replace_handlers(root_logger, tmp_path) -> None:
    log_file = tmp_path / "console.log"
    setup_logging(logging.WARNING, str(log_file))
    setup_logging(logging.WARNING, str(log_file))
    assert len(root_logger.handlers) == 2
    logging.getLogger("collection.regula").warning("refresh failed")
    for handler in root_logger.handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert text.count("refresh failed") == 1
    assert "[WARNING] collection.regula: refresh failed" in text
