"""Global exception handlers for consistent error responses.

Every error leaves the API as a flat JSON object::

    {"code": "...", "message": "...", "request_id": "..."}

Status codes by error type:
- ValidationAppError, DuplicateEmailAppError → 400
- RateLimitAppError → 429 (+ Retry-After / X-RateLimit-* headers)
- StorageAppError and anything unexpected → 500 with a generic message;
  the underlying cause is only logged
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import (
    AppError,
    DuplicateEmailAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id
from app.core.rate_limit import rate_limit_headers

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def _status_for(exc: AppError) -> int:
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, StorageAppError):
        return 500
    if isinstance(exc, (ValidationAppError, DuplicateEmailAppError)):
        return 400
    return 500


def _include_rate_limit_headers(request: Request) -> bool:
    config = getattr(request.app.state, "settings", None) or settings
    return config.app.rate_limit_include_headers


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map domain errors to their HTTP status and JSON body.

    Client errors (4xx) carry their details; server errors (5xx) never do,
    and are logged with the original cause instead.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = _status_for(exc)
    request_id = get_request_id()

    if status_code >= 500:
        logger.error(
            "app_error_handled",
            exc_info=exc,
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "cause_type": type(exc.__cause__).__name__ if exc.__cause__ else None,
                "status_code": status_code,
                "request_path": request.url.path,
            },
        )
    else:
        logger.warning(
            "app_error_handled",
            extra={
                "error_code": exc.code,
                "status_code": status_code,
                "request_path": request.url.path,
            },
        )

    content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": request_id,
    }
    if exc.details and status_code < 500:
        content["details"] = exc.details

    headers = None
    if isinstance(exc, RateLimitAppError) and _include_rate_limit_headers(request):
        headers = rate_limit_headers(exc) or None

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the full error server side and returns a generic body, so no stack
    trace or internal message reaches the client.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "code": "internal_server_error",
            "message": GENERIC_ERROR_MESSAGE,
            "request_id": get_request_id(),
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
