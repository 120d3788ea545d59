"""
Unit Tests for Logging
"""
import json
import logging

import pytest

from portal.core.logging_config import (
    ContextFilter,
    JSONFormatter,
    logger,
    request_context,
    set_request_id,
    set_user_id,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("portal", logging.INFO, __file__, 1, "hello", (), None)
    record.__dict__.update(extra)
    return record


@pytest.fixture(autouse=True)
def clear_context():
    yield
    set_request_id("")
    set_user_id("")


class TestRequestContext:

    def test_unset_ids_render_as_dash(self):
        assert request_context() == {"request_id": "-", "user_id": "-"}

    def test_filter_stamps_ids(self):
        set_request_id("ab12cd34")
        set_user_id("user-1")
        record = make_record()

        assert ContextFilter().filter(record) is True
        assert record.request_id == "ab12cd34"
        assert record.user_id == "user-1"


class TestJSONFormatter:

    def test_extra_fields_inlined(self):
        record = make_record(auth_event="register", request_id="ab12cd34")

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["auth_event"] == "register"
        assert entry["request_id"] == "ab12cd34"
        assert "args" not in entry


class TestPortalLogger:

    @pytest.mark.parametrize("status_code,level", [
        (201, logging.INFO),
        (404, logging.WARNING),
        (500, logging.ERROR),
    ])
    def test_http_request_level_follows_status(self, status_code, level):
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Collect()
        logger.addHandler(handler)
        try:
            logger.log_http_request("POST", "/api/v1/students/register", status_code, 12.5)
        finally:
            logger.removeHandler(handler)

        [record] = records
        assert record.levelno == level
        assert record.http_status == status_code
        assert record.duration_ms == 12.5
