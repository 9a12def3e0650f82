"""Tests for the package's logger setup."""

import logging
from uuid import uuid4

from resio.loggers import (
    ROOT_LOGGER,
    LogNameFilter,
    UTCFormatter,
    get_child_logger,
    get_default_handler,
    get_logger,
)


def _record(name: str) -> logging.LogRecord:
    record = logging.LogRecord(name, logging.INFO, __file__, 1, "message", None, None)
    record.created = 0.0
    return record


def test_name_filter_keeps_last_component():
    """Test that only the last component of the logger name is kept."""
    record = _record("resio.implementations.s3")
    assert LogNameFilter().filter(record)
    assert record.name == "s3"


def test_formatter_uses_utc():
    """Test that timestamps are formatted in UTC."""
    formatter = UTCFormatter("%(asctime)s", datefmt="%Y-%m-%d %H:%M:%S")
    assert formatter.format(_record("resio")) == "1970-01-01 00:00:00"


def test_default_handler():
    """Test that the default handler filters names and formats messages."""
    handler = get_default_handler()
    record = _record("resio.service")
    assert handler.filter(record)
    assert handler.format(record).endswith("INFO - service: message")


def test_get_logger_is_configured_once():
    """Test that base loggers get one handler and don't propagate."""
    name = f"resio-test-{uuid4().hex}"
    logger = get_logger(name)
    assert not logger.propagate
    assert len(logger.handlers) == 1
    assert get_logger(name) is logger
    assert len(logger.handlers) == 1


def test_child_loggers_propagate_to_parent():
    """Test that child loggers are named beneath their parent."""
    child = get_child_logger("implementations", ROOT_LOGGER)
    assert child.name == "resio.implementations"
    assert child.parent is ROOT_LOGGER
    assert get_child_logger("top", logging.getLogger()).name == "top"
