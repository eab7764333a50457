from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from bmex.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture()
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])


def test_setup_logging_installs_handlers_once(clean_logger, tmp_path):
    logger = setup_logging(logging.INFO, log_dir=tmp_path)
    again = setup_logging(logging.INFO, log_dir=tmp_path)

    assert logger is again is clean_logger
    assert len(logger.handlers) == 2
    file_handler = next(h for h in logger.handlers if isinstance(h, RotatingFileHandler))
    assert file_handler.baseFilename == str(tmp_path / "bmex.log")
    assert file_handler.level == logging.INFO


def test_file_handler_receives_debug(clean_logger, tmp_path):
    logger = setup_logging(logging.DEBUG, log_dir=tmp_path)
    logger.debug("GET /api/v1/position -> ")
    for handler in logger.handlers:
        handler.flush()
    assert "GET /api/v1/position" in (tmp_path / "bmex.log").read_text(encoding="utf-8")


@pytest.fixture()
def transport_logger():
    logger = logging.getLogger("urllib3")
    level = logger.level
    yield logger
    logger.setLevel(level)


def test_transport_chatter_held_at_warning(clean_logger, transport_logger, tmp_path):
    setup_logging(logging.DEBUG, log_dir=tmp_path)
    assert transport_logger.level == logging.WARNING


def test_transport_debug_opt_in(clean_logger, transport_logger, tmp_path):
    setup_logging(logging.DEBUG, log_dir=tmp_path, transport_debug=True)
    assert transport_logger.level == logging.DEBUG
