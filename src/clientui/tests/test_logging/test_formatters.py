# src/clientui/tests/test_logging/test_formatters.py
import json
import logging
import sys

from clientui.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(exc_info=None):
    return logging.LogRecord("clientui", logging.WARNING, __file__, 10, "hello %s", ("tester",), exc_info)


def test_json_formatter_basic_fields():
    rec = make_record()
    rec.operation = "patients.get"
    rec.request_id = "req-1"

    data = json.loads(JsonFormatter(env="testing", service="svc").format(rec))

    assert data["message"] == "hello tester"
    assert data["level"] == "WARNING"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert data["request_id"] == "req-1"
    assert data["operation"] == "patients.get"
    assert "timestamp" in data
    assert "version" in data


def test_json_formatter_keeps_structured_extras():
    rec = make_record()
    rec.error = {"kind": "conflict", "status": 409, "fields": ["lastname"]}

    data = json.loads(JsonFormatter().format(rec))

    assert data["error"] == {"kind": "conflict", "status": 409, "fields": ["lastname"]}
    # standard LogRecord attributes stay out
    assert "args" not in data
    assert "msg" not in data


def test_json_formatter_non_serializable_extra():
    rec = make_record()

    class X:
        def __repr__(self):
            return "<X>"

    rec.obj = X()

    data = json.loads(JsonFormatter(env="dev", service="svc").format(rec))

    assert isinstance(data["obj"], str)


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        rec = make_record(exc_info=sys.exc_info())

    data = json.loads(JsonFormatter().format(rec))

    assert "ValueError: boom" in data["exc_info"]


def test_color_formatter_line():
    rec = make_record()
    rec.request_id = "req-9"

    line = ColorFormatter().format(rec)

    assert "WARNING" in line
    assert "req-9" in line
    assert line.endswith("hello tester")
