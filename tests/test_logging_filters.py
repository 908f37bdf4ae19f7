"""Tests for sensitive data filtering in logs."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest

from app.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_for_log,
    set_request_id,
)


@pytest.fixture
def capture():
    logger = logging.getLogger("test_waitlist_logging")
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


def test_email_and_keys_are_redacted(capture):
    logger, stream = capture

    logger.info(
        "waitlist.joined",
        extra={
            "email": "person@example.com",
            "resend_api_key": "re_secret_123",
            "position": 7,
        },
    )

    output = stream.getvalue()
    assert "person@example.com" not in output
    assert "re_secret_123" not in output
    assert "[REDACTED]" in output
    assert json.loads(output)["position"] == 7


def test_nested_forwarding_headers_are_redacted(capture):
    logger, stream = capture

    logger.info(
        "request.debug",
        extra={"headers": {"x-forwarded-for": "203.0.113.9", "user-agent": "pytest"}},
    )

    output = stream.getvalue()
    assert "203.0.113.9" not in output
    assert "pytest" in output


def test_safe_fields_pass_through(capture):
    logger, stream = capture

    logger.info(
        "safe_event",
        extra={"route": "/api/waitlist", "status": 200, "email_hash": hash_for_log("a@b.co")},
    )

    output = stream.getvalue()
    assert "/api/waitlist" in output
    assert hash_for_log("a@b.co") in output
    assert "[REDACTED]" not in output


def test_request_id_from_context_is_attached(capture):
    logger, stream = capture
    set_request_id("req-abc-123")

    logger.info("with_context")

    assert json.loads(stream.getvalue())["request_id"] == "req-abc-123"


def test_hash_for_log_is_stable_and_short():
    assert hash_for_log("a@b.co") == hash_for_log("a@b.co")
    assert hash_for_log("a@b.co") != hash_for_log("A@b.co")
    assert len(hash_for_log("a@b.co")) == 16
