"""Tests for structured logging output and settings."""

import logging

import pytest
from pydantic import ValidationError

from affinity_placement.config import Settings
from affinity_placement.logger import ROOT_LOGGER_NAME, _PlacementFormatter, get_logger


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def records():
    handler = _ListHandler()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


def test_bound_logger_fields(records):
    """Test category, event and fields reach the record."""
    get_logger("tests").info("placement_config.set", "Installed", count=2)
    record = records[-1]
    assert record.category == "tests"
    assert record.event == "placement_config.set"
    assert record.fields == {"count": 2}


def test_context_fields(records):
    """Test context fields are merged into records."""
    logger = get_logger("tests")
    with logger.context(request_id="abc"):
        logger.info("request.start", "Started")
    logger.info("request.after", "After")
    assert records[-2].fields == {"request_id": "abc"}
    assert records[-1].fields == {}


def test_operation_logs_error_and_propagates(records):
    """Test an operation records failures without swallowing them."""
    logger = get_logger("tests")
    with pytest.raises(RuntimeError):
        with logger.operation("demo", "Running demo"):
            raise RuntimeError("boom")
    assert records[-1].event == "operation.error"
    assert records[-1].fields["error_type"] == "RuntimeError"


def test_formatter_layout(records):
    """Test the pipe-separated line format."""
    get_logger("tests").warning("placement_config.conflict", "Conflict", collections="a,b")
    line = _PlacementFormatter().format(records[-1])
    assert " | tests | (!) placement_config.conflict | Conflict | collections: a,b" in line


def test_settings_log_level_normalized():
    """Test log levels are upper-cased."""
    assert Settings(log_level="debug").log_level == "DEBUG"


def test_settings_rejects_unknown_log_level():
    """Test unknown log levels fail."""
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")
