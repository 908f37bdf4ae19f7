"""Application-level exception types.

Domain errors raised by the signup workflow and its adapters. The HTTP layer
maps each type to a status code in ``app.core.exception_handlers``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when the signup payload is malformed or the email is invalid."""


class DuplicateEmailAppError(AppError):
    """Raised when the email is already on the waitlist.

    Covers both the pre-insert lookup and the store's uniqueness constraint.
    """


class RateLimitAppError(AppError):
    """Raised when a client exceeds its signup budget for the current window."""


class StorageAppError(AppError):
    """Raised when the waitlist store fails unexpectedly."""


class NotificationAppError(AppError):
    """Raised when a welcome notification cannot be delivered.

    Never reaches the client; the dispatcher logs and drops it.
    """
