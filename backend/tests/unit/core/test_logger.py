"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from authapi.core.logger import REQUEST_ID_HEADER, JSONFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("authapi.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG


def test_json_formatter_renders_message_and_known_extras() -> None:
    payload = json.loads(
        JSONFormatter().format(_record(method="POST", status=201, subject="7", secret="x"))
    )

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["method"] == "POST"
    assert payload["status"] == 201
    assert payload["subject"] == "7"
    # Arbitrary attributes are not copied into the payload.
    assert "secret" not in payload


def test_request_id_is_echoed_or_generated(client) -> None:
    resp = client.get("/api/v1/health", headers={REQUEST_ID_HEADER: "req-123"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-123"

    resp = client.get("/api/v1/health")
    assert resp.headers[REQUEST_ID_HEADER]


def test_problem_responses_carry_request_id(client) -> None:
    resp = client.get("/api/v1/auth/me", headers={REQUEST_ID_HEADER: "req-401"})

    assert resp.status_code == 401
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["request_id"] == "req-401"
