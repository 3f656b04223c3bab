import json
import logging
import sys

from smarttrip.core.logging import StructuredFormatter, configure_logging


def test_formatter_emits_json_with_extra_fields():
    record = logging.LogRecord("smarttrip.pipeline", logging.INFO, __file__, 1, "Trip %s started", ("t-1",), None)
    record.trip_id = "t-1"

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "smarttrip.pipeline"
    assert entry["message"] == "Trip t-1 started"
    assert entry["trip_id"] == "t-1"
    assert "timestamp" in entry


def test_formatter_includes_exception():
    try:
        raise ValueError("bad payload")
    except ValueError:
        record = logging.LogRecord("smarttrip", logging.ERROR, __file__, 1, "failed", (), None)
        record.exc_info = sys.exc_info()

    entry = json.loads(StructuredFormatter().format(record))

    assert "ValueError: bad payload" in entry["exception"]


def test_configure_logging_installs_single_handler():
    logger = configure_logging("debug", logger_name="smarttrip.test")
    configure_logging("debug", logger_name="smarttrip.test")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, StructuredFormatter)
