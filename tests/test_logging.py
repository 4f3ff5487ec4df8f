"""Tests for structured logging configuration."""

import json
import logging
import sys

from complaintdesk.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
)


def make_record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_json_format_with_rate_limit_context(self):
        record = make_record("Rate limit exceeded for write operations")
        record.operation = "write"
        record.limiter_key = "write:create_template"
        record.retry_after = 42

        data = json.loads(JSONFormatter().format(record))

        assert data["operation"] == "write"
        assert data["limiter_key"] == "write:create_template"
        assert data["retry_after"] == 42
        assert "extra" not in data or "operation" not in data["extra"]

    def test_json_format_with_extra_fields(self):
        record = make_record("Custom event")
        record.custom_field = "custom_value"

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["custom_field"] == "custom_value"

    def test_json_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        exception_text = "".join(data["exception"])
        assert "ValueError" in exception_text
        assert "Test error" in exception_text


class TestContextFilter:
    """Test context filter for adding default fields."""

    def test_adds_default_fields(self):
        record = make_record()

        assert ContextFilter().filter(record) is True
        for field in ("request_id", "user_id", "operation", "limiter_key", "retry_after"):
            assert getattr(record, field) is None

    def test_preserves_existing_values(self):
        record = make_record()
        record.operation = "bulk"

        ContextFilter().filter(record)

        assert record.operation == "bulk"


class TestLoggingConfig:
    """Test dictConfig generation."""

    def test_json_format_selected(self, monkeypatch):
        from complaintdesk.app.core.config import settings

        monkeypatch.setattr(settings, "log_format", "json")
        config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"
        assert "complaintdesk" in config["loggers"]

    def test_text_format_by_default(self, monkeypatch):
        from complaintdesk.app.core.config import settings

        monkeypatch.setattr(settings, "log_format", "text")
        config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "standard"

    def test_get_log_context_drops_none(self):
        context = get_log_context(operation="read", limiter_key=None, retry_after=3)

        assert context == {"operation": "read", "retry_after": 3}

    def test_get_logger(self):
        assert get_logger("complaintdesk.test").name == "complaintdesk.test"
