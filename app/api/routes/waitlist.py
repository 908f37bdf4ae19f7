import json

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from app.core.errors import StorageAppError
from app.core.rate_limit import get_client_identifier
from app.schemas.waitlist import (
    WaitlistCountResponse,
    WaitlistSignupRequest,
    WaitlistSignupResponse,
)
from app.services.waitlist_service import WaitlistService

router = APIRouter(prefix="/waitlist", tags=["Waitlist"])

_ERROR_RESPONSES = {
    400: {"description": "Invalid email or email already on the waitlist"},
    429: {"description": "Too many signup attempts from this client"},
    500: {"description": "Unexpected backend failure"},
}


def get_waitlist_service(request: Request) -> WaitlistService:
    """Resolve the service instance built by the app factory."""
    return request.app.state.waitlist_service


async def _read_json_body(request: Request):
    # Malformed bodies are handed to the workflow as None so they fail
    # validation after the rate check, like any other bad payload.
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return None


@router.post(
    "",
    response_model=WaitlistSignupResponse,
    responses=_ERROR_RESPONSES,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": WaitlistSignupRequest.model_json_schema()}},
        }
    },
)
async def join_waitlist(
    request: Request,
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistSignupResponse:
    """Add an email to the waitlist.

    Returns the stored entry and its position; the welcome email is sent in
    the background and never delays the response.

    Raises:
        RateLimitAppError: 429 when the client exceeded its signup budget.
        ValidationAppError: 400 for a missing or malformed email.
        DuplicateEmailAppError: 400 when the email is already subscribed.
        StorageAppError: 500 when the database fails.
    """
    raw_input = await _read_json_body(request)
    client_identifier = get_client_identifier(request)

    try:
        result = await run_in_threadpool(service.submit, raw_input, client_identifier)
    except StorageAppError as exc:
        raise StorageAppError(
            code=exc.code,
            message="Failed to join waitlist. Please try again.",
        ) from exc

    return WaitlistSignupResponse(entry=result.entry, position=result.position)


@router.get(
    "/count",
    response_model=WaitlistCountResponse,
    responses={500: {"description": "Unexpected backend failure"}},
)
def waitlist_count(
    service: WaitlistService = Depends(get_waitlist_service),
) -> WaitlistCountResponse:
    """Return the number of people on the waitlist."""
    try:
        return WaitlistCountResponse(count=service.count())
    except StorageAppError as exc:
        raise StorageAppError(code=exc.code, message="Failed to retrieve count") from exc
