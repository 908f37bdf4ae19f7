"""Tests for global exception handlers.

Validates that every error type maps to the right status code with a flat
JSON body and that server-side failures never leak internal details.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    DuplicateEmailAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="validation_error", message="Please enter a valid email address")

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "validation_error"
        assert data["message"] == "Please enter a valid email address"
        assert "request_id" in data

    def test_duplicate_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-duplicate")
        async def endpoint():
            raise DuplicateEmailAppError(code="duplicate_email", message="This email is already on the waitlist")

        response = client.get("/test-duplicate")

        assert response.status_code == 400
        assert response.json()["code"] == "duplicate_email"

    def test_rate_limit_returns_429_with_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate")
        async def endpoint():
            raise RateLimitAppError(
                code="rate_limited",
                message="Too many requests. Please try again in a minute.",
                details={"limit": 3, "remaining": 0, "reset_at": 1060, "retry_after": 30},
            )

        response = client.get("/test-rate")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "30"
        assert response.json()["details"]["limit"] == 3

    def test_storage_error_returns_500_without_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-storage")
        async def endpoint():
            raise StorageAppError(
                code="storage_error",
                message="Failed to join waitlist. Please try again.",
                details={"hint": "connection refused on 10.0.0.5"},
            )

        response = client.get("/test-storage")

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Failed to join waitlist. Please try again."
        assert "details" not in data
        assert "10.0.0.5" not in response.text

    def test_base_app_error_defaults_to_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-base")
        async def endpoint():
            raise AppError(code="something", message="Something failed")

        assert client.get("/test-base").status_code == 500


class TestGeneralExceptionHandler:
    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_logic(self):
        request = AsyncMock()
        request.url.path = "/api/waitlist"
        request.method = "POST"

        exc = RuntimeError("Unexpected error: database connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["code"] == "internal_server_error"
        assert "database connection" not in data["message"]
        assert "request_id" in data

    def test_general_exception_handler_never_leaks_stack_trace(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def endpoint():
            raise ValueError("Test error with details")

        response = client.get("/test-crash")

        assert response.status_code == 500
        assert "Traceback" not in response.text
        assert "ValueError" not in response.text
        assert "Test error with details" not in response.text


def test_multiple_handler_setups_does_not_fail():
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
