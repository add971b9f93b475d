from __future__ import annotations

import logging
from io import StringIO

from delivery_tracker.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    set_debug,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    """Point the logger's handler at a buffer."""
    buf = StringIO()
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    handler.setStream(buf)
    return buf


def test_setup_logging_creates_logger_with_labeled_formatter():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)


def test_logging_labeled_prefixes():
    logger = setup_logging()
    buf = _capture(logger)

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    assert buf.getvalue().strip().split("\n") == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_child_module_loggers_share_the_handler():
    buf = _capture(setup_logging())
    logging.getLogger(f"{LOGGER_NAME}.pipeline.route_import").info("route export: drivers=1 legs=2")
    assert buf.getvalue() == "INFO route export: drivers=1 legs=2\n"


def test_get_logger_returns_configured_logger():
    logger = setup_logging()
    assert get_logger() is logger


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1


def test_set_debug_lowers_levels():
    logger = setup_logging()
    buf = _capture(logger)
    logger.debug("hidden")
    set_debug()
    logger.debug("shown")
    out = buf.getvalue()
    assert "hidden" not in out
    assert "DEBUG shown" in out


def test_log_summary_convenience_function():
    buf = _capture(setup_logging())
    log_summary("files=2/2 records=3 orders=10")
    assert buf.getvalue().strip() == "SUMMARY files=2/2 records=3 orders=10"
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"


def test_reset_logging_restores_propagation():
    setup_logging()
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    assert logger.handlers == []
    assert logger.propagate is True
