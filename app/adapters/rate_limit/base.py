"""Rate limiter interfaces.

The signup workflow depends on this abstraction so the in-process table can
later be replaced by a shared counter (e.g., Redis INCR + EXPIRE) when the
API runs on more than one instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit decision.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window expires.
        retry_after_seconds: Suggested wait time when blocked, else None.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


UNKNOWN_CLIENT = "unknown"


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and decide whether it is allowed.

        Args:
            key: Client identifier (e.g., source IP).

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    def check(self, key: str) -> bool:
        """Shorthand for ``consume(key).allowed``."""
        return self.consume(key).allowed
