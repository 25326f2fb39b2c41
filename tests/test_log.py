"""
Tests for structured logging setup.
"""

import json
import logging

import pytest
import structlog

from backoff_core.log import JSONFormatter, new_call_id, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_setup_logging_emits_json_lines(restore_logging, capsys):
    setup_logging(service_name="uploader", level="DEBUG")

    structlog.get_logger("backoff_core.test").warning(
        "rate_limited_retry", wait_seconds=30, call_id="abc123"
    )

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line]
    assert lines[0]["event"] == "logging_configured"
    record = lines[-1]
    assert record["event"] == "rate_limited_retry"
    assert record["wait_seconds"] == 30
    assert record["call_id"] == "abc123"
    assert record["level"] == "warning"
    assert record["service"] == "uploader"


def test_setup_logging_console_output(restore_logging, capsys):
    setup_logging(service_name="uploader", json_output=False)

    structlog.get_logger("backoff_core.test").info("quota_exceeded_retry", attempt=2)

    out = capsys.readouterr().out
    assert "quota_exceeded_retry" in out
    assert "attempt=2" in out


def test_formatter_handles_plain_records():
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "plain %s", ("message",), None)

    data = json.loads(JSONFormatter().format(record))

    assert data["event"] == "plain message"
    assert data["level"] == "ERROR"


def test_call_ids_are_unique():
    assert len({new_call_id() for _ in range(100)}) == 100
