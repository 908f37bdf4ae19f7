"""HTTP-side helpers for rate limiting.

The limiter itself lives in ``app.adapters.rate_limit`` and is consulted by
the signup workflow. This module only deals with the HTTP concerns around
it: deriving the client identifier from a request and turning a throttling
decision into response headers.

Client identification (most to least preferred):
- first address in ``X-Forwarded-For`` (set by the edge proxy)
- ``X-Real-IP``
- the shared literal ``"unknown"`` (all such clients share one budget)
"""

from __future__ import annotations

from fastapi import Request

from app.adapters.rate_limit.base import UNKNOWN_CLIENT
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import Settings
from app.core.errors import RateLimitAppError


def build_rate_limiter(config: Settings) -> InMemoryFixedWindowRateLimiter:
    """Create the process-wide limiter from settings (called once at startup)."""

    return InMemoryFixedWindowRateLimiter(
        limit=config.app.rate_limit_requests,
        window_seconds=config.app.rate_limit_window_seconds,
        sweep_interval_seconds=config.app.rate_limit_sweep_interval_seconds,
    )


def get_client_identifier(request: Request) -> str:
    """Derive the rate limit key for a request.

    Args:
        request: Incoming FastAPI request.

    Returns:
        str: Client address, or ``"unknown"`` when none can be determined.
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


def rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    """Build Retry-After / X-RateLimit-* headers for a throttled response."""

    details = exc.details or {}
    headers: dict[str, str] = {}
    if "retry_after" in details:
        headers["Retry-After"] = str(details["retry_after"])
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    if "remaining" in details:
        headers["X-RateLimit-Remaining"] = str(details["remaining"])
    if "reset_at" in details:
        headers["X-RateLimit-Reset"] = str(details["reset_at"])
    return headers
