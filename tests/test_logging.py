"""Root logger setup and the request-id log field."""
import logging

import pytest

from bloodbank.core.config import settings
from bloodbank.core.logging import RequestIDFilter, setup_logging


def format_record(record):
    RequestIDFilter().filter(record)
    return logging.Formatter(settings.LOG_FORMAT).format(record)


def test_default_format_includes_request_id():
    record = logging.LogRecord("bloodbank.test", logging.INFO, __file__, 1, "checked", None, None)
    record.request_id = "req-42"
    assert "[req-42] checked" in format_record(record)


def test_records_outside_a_request_show_placeholder():
    record = logging.LogRecord("bloodbank.test", logging.INFO, __file__, 1, "startup", None, None)
    assert "[N/A] startup" in format_record(record)


@pytest.fixture
def restore_logging():
    yield
    setup_logging()


def test_file_handler_writes_request_ids(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "app.log"
    root_logger = setup_logging(log_file=str(log_file))

    log = logging.getLogger("bloodbank.test")
    log.warning("inside request", extra={"request_id": "abc-123"})
    log.warning("outside request")
    for handler in root_logger.handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith("[abc-123] inside request")
    assert lines[1].endswith("[N/A] outside request")
