"""Waitlist signup workflow.

Turns a raw signup request into a persisted, deduplicated waitlist entry and
its position:

1. rate check per client identifier (before any store access)
2. payload validation
3. duplicate lookup
4. insert (a uniqueness violation counts as a duplicate too)
5. position = total entries after the insert
6. welcome notification, dispatched in the background
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from app.adapters.rate_limit.base import UNKNOWN_CLIENT, AbstractRateLimiter
from app.adapters.storage.base import AbstractWaitlistStore
from app.core.errors import DuplicateEmailAppError, RateLimitAppError, ValidationAppError
from app.core.logging import hash_for_log
from app.schemas.waitlist import (
    DUPLICATE_EMAIL_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    WaitlistEntry,
    WaitlistSignupRequest,
)
from app.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many requests. Please try again in a minute."


@dataclass(frozen=True)
class SignupResult:
    """Successful signup: the stored entry and its waitlist position."""

    entry: WaitlistEntry
    position: int


class WaitlistService:
    """Orchestrates waitlist signups over a store, a limiter and a notifier."""

    def __init__(
        self,
        *,
        store: AbstractWaitlistStore,
        limiter: AbstractRateLimiter,
        dispatcher: NotificationDispatcher,
        rate_limit_enabled: bool = True,
    ) -> None:
        self._store = store
        self._limiter = limiter
        self._dispatcher = dispatcher
        self._rate_limit_enabled = rate_limit_enabled

    def _enforce_rate_limit(self, client_identifier: str) -> None:
        if not self._rate_limit_enabled:
            return

        key = client_identifier or UNKNOWN_CLIENT
        result = self._limiter.consume(key)
        if result.allowed:
            return

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_hash": hash_for_log(key),
                "limit": result.limit,
                "retry_after_s": retry_after,
            },
        )
        raise RateLimitAppError(
            code="rate_limited",
            message=RATE_LIMITED_MESSAGE,
            details={
                "limit": result.limit,
                "remaining": result.remaining,
                "reset_at": result.reset_at,
                "retry_after": retry_after,
            },
        )

    @staticmethod
    def _validate(raw_input: Any) -> str:
        try:
            request = WaitlistSignupRequest.model_validate(raw_input)
        except ValidationError as exc:
            raise ValidationAppError(
                code="validation_error",
                message=INVALID_EMAIL_MESSAGE,
                details={"context": {"errors": exc.error_count()}},
            ) from exc
        return request.email

    def submit(self, raw_input: Any, client_identifier: str = UNKNOWN_CLIENT) -> SignupResult:
        """Run the signup workflow for one request.

        Args:
            raw_input: Decoded request body; expected shape ``{"email": str}``.
            client_identifier: Key used for rate limiting (e.g., source IP).

        Returns:
            SignupResult with the persisted entry and its position.

        Raises:
            RateLimitAppError: Client exceeded its budget for the current window.
            ValidationAppError: Body is not a valid signup payload.
            DuplicateEmailAppError: Email is already on the waitlist.
            StorageAppError: The store failed.
        """
        self._enforce_rate_limit(client_identifier)

        email = self._validate(raw_input)
        email_hash = hash_for_log(email)

        if self._store.exists_by_email(email):
            logger.info("waitlist.duplicate", extra={"email_hash": email_hash, "stage": "lookup"})
            raise DuplicateEmailAppError(code="duplicate_email", message=DUPLICATE_EMAIL_MESSAGE)

        try:
            entry = self._store.insert(email)
        except DuplicateEmailAppError:
            logger.info("waitlist.duplicate", extra={"email_hash": email_hash, "stage": "insert"})
            raise

        position = self._store.count()

        logger.info(
            "waitlist.joined",
            extra={"email_hash": email_hash, "entry_id": entry.id, "position": position},
        )

        self._dispatcher.dispatch(email, position)

        return SignupResult(entry=entry, position=position)

    def count(self) -> int:
        """Return the total number of waitlist entries."""
        return self._store.count()
