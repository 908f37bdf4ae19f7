from __future__ import annotations

from unittest.mock import Mock

from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import Settings
from app.main import app
from conftest import InMemoryWaitlistStore, RecordingNotifier


client = TestClient(app)


def test_preserves_incoming_request_id_header():
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing():
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_error_body_carries_request_id():
    resp = client.post(
        "/api/waitlist",
        json={"email": "not-an-email"},
        headers={"X-Request-ID": "req-err-1", "X-Forwarded-For": "198.51.100.77"},
    )

    assert resp.status_code == 400
    assert resp.json()["request_id"] == "req-err-1"


def test_unexpected_error_response_carries_request_id():
    store = Mock()
    store.exists_by_email.side_effect = RuntimeError("connection reset by peer")
    failing_app = create_app(Settings(), store=store, notifier=RecordingNotifier())

    with TestClient(failing_app, raise_server_exceptions=False) as failing_client:
        resp = failing_client.post(
            "/api/waitlist",
            json={"email": "x@example.com"},
            headers={"X-Request-ID": "req-500-1"},
        )

    assert resp.status_code == 500
    assert resp.json()["code"] == "internal_server_error"
    assert resp.json()["request_id"] == "req-500-1"
    assert resp.headers.get("X-Request-ID") == "req-500-1"


def test_uses_header_name_from_app_config():
    config = Settings()
    config.log.request_id_header = "X-Correlation-ID"
    custom_app = create_app(config, store=InMemoryWaitlistStore(), notifier=RecordingNotifier())

    with TestClient(custom_app) as custom_client:
        resp = custom_client.get("/health", headers={"X-Correlation-ID": "corr-42"})

    assert resp.headers.get("X-Correlation-ID") == "corr-42"
