"""Tests for redaction and request correlation in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from story_api.core.config import LogSettings
from story_api.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    configure_logging,
    set_request_id,
)


@pytest.fixture
def capture():
    """Logger wired to an in-memory JSON handler."""
    logger = logging.getLogger("test_story_logging")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    yield logger, stream

    logger.handlers.clear()
    clear_request_id()


def _last_line(stream: StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


def test_story_content_is_redacted(capture):
    logger, stream = capture

    logger.info(
        "story.debug",
        extra={
            "story_text": "my secret confession",
            "username": "Al",
            "char_count": 20,
        },
    )

    output = stream.getvalue()
    assert "my secret confession" not in output
    assert '"Al"' not in output
    assert "[REDACTED]" in output
    assert _last_line(stream)["char_count"] == 20


def test_client_address_is_redacted_in_nested_values(capture):
    logger, stream = capture

    logger.info(
        "request.debug",
        extra={"client": {"client_ip": "203.0.113.7", "user-agent": "pytest"}},
    )

    output = stream.getvalue()
    assert "203.0.113.7" not in output
    assert "pytest" in output


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "story.created",
        extra={"story_id": 3, "flagged": False, "request_path": "/api/stories"},
    )

    record = _last_line(stream)
    assert record["message"] == "story.created"
    assert record["level"] == "info"
    assert record["story_id"] == 3
    assert record["request_path"] == "/api/stories"
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_is_attached_from_context(capture):
    logger, stream = capture
    set_request_id("req-42")

    logger.info("with_context")

    assert _last_line(stream)["request_id"] == "req-42"


def test_exception_info_is_formatted(capture):
    logger, stream = capture

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("failed")

    assert "RuntimeError: boom" in _last_line(stream)["exc_info"]


def test_configure_logging_replaces_root_handlers():
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    try:
        configure_logging(LogSettings(level="DEBUG", format="plain"))
        configure_logging(LogSettings(level="ERROR"))

        assert len(root.handlers) == 1
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_configure_logging_to_file(tmp_path):
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    log_file = tmp_path / "logs" / "app.log"
    try:
        configure_logging(LogSettings(output="file", file_path=str(log_file)))
        logging.getLogger("file_test").warning("to_file", extra={"text": "hidden"})
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)

    content = log_file.read_text(encoding="utf-8")
    assert "to_file" in content
    assert "hidden" not in content
