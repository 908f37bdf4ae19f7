"""Pydantic schemas for waitlist signup requests and responses."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

# local@domain.tld with a TLD of at least two characters, no whitespace or extra "@"
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]{2,}")

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
DUPLICATE_EMAIL_MESSAGE = "This email is already on the waitlist"


class WaitlistSignupRequest(BaseModel):
    """Body accepted by ``POST /api/waitlist``."""

    email: str = Field(..., description="Email address to add to the waitlist.")

    @field_validator("email")
    @classmethod
    def _check_email_shape(cls, value: str) -> str:
        if not EMAIL_PATTERN.fullmatch(value):
            raise ValueError(INVALID_EMAIL_MESSAGE)
        return value


class WaitlistEntry(BaseModel):
    """A persisted waitlist entry."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Opaque unique identifier assigned at insert time.")
    email: str = Field(..., description="Subscribed email address (case-sensitive).")
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="Insert timestamp; orders entries for position counting.",
    )


class WaitlistSignupResponse(BaseModel):
    """Successful signup payload."""

    success: bool = True
    entry: WaitlistEntry
    position: int = Field(
        ..., description="1-based position: total entries right after this insert."
    )


class WaitlistCountResponse(BaseModel):
    count: int = Field(..., description="Total number of waitlist entries.")
