"""HTTP middleware for request correlation.

Every response carries the request id (taken from the incoming header or
freshly generated) and the time spent handling the request. The id is kept
in a contextvar for the lifetime of the request so logs emitted anywhere in
the signup workflow can be correlated.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.exception_handlers import general_exception_handler
from app.core.logging import clear_request_id, set_request_id


def _request_id_header(request: Request) -> str:
    config = getattr(request.app.state, "settings", None) or settings
    return config.log.request_id_header


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a correlation id and duration header to each response.

    Unexpected exceptions are turned into the generic 500 here, while the id
    is still in context, so the error body and headers carry it too.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with ``X-Request-ID`` (or the
            configured header) and ``X-Request-Duration-ms`` set.
    """

    header_name = _request_id_header(request)
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        response = await general_exception_handler(request, exc)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
