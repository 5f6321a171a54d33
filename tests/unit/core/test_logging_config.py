import json
import logging
import sys

from event_aggregator.core.logger import get_logger
from event_aggregator.core.logging_config import (
    JsonLogFormatter,
    configure_logging,
    redact,
)


def _record(msg="hello", extra=None, exc_info=None):
    logger = logging.getLogger("test.logging")
    return logger.makeRecord(
        "test.logging", logging.INFO, __file__, 1, msg, (), exc_info, extra=extra
    )


def test_redact_masks_nested_keys():
    out = redact(
        {"user": "a", "Password": "x", "nested": {"api_token": "t"}},
        ("password", "token"),
    )
    assert out == {"user": "a", "Password": "[REDACTED]", "nested": {"api_token": "[REDACTED]"}}


def test_formatter_envelope_and_extras():
    fmt = JsonLogFormatter("event-aggregator", "test", ["secret"])
    line = fmt.format(_record(extra={"event_id": "e1", "client_secret": "s"}))
    data = json.loads(line)
    assert data["message"] == "hello"
    assert data["level"] == "INFO"
    assert data["logger"] == "test.logging"
    assert data["service"] == "event-aggregator"
    assert data["environment"] == "test"
    assert data["event_id"] == "e1"
    assert data["client_secret"] == "[REDACTED]"
    assert "args" not in data


def test_formatter_includes_exception():
    fmt = JsonLogFormatter("svc", "test", [])
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record(exc_info=sys.exc_info())
    data = json.loads(fmt.format(record))
    assert data["exception"]["type"] == "ValueError"
    assert data["exception"]["message"] == "boom"


def test_configure_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="debug")
        configure_logging(level="warning")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonLogFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


def test_get_logger_namespace():
    assert get_logger("x").name == "event_aggregator.x"


def test_configure_logging_unknown_level_falls_back_to_info():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="chatty")
        assert root.level == logging.INFO
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
