"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: check-and-increment happens under a single lock.
- Windows start at a client's first request (not aligned to the wall clock)
  and expired windows are swept out periodically so the table stays bounded.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowState:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per key inside a fixed window.

    The first request from a key opens a window of ``window_seconds``. Up to
    ``limit`` requests are allowed inside it; further requests are rejected
    without being counted. Once the window has elapsed the next request opens
    a fresh one.

    Important:
        This limiter is per-process only. Behind several Uvicorn/Gunicorn
        workers or instances each one enforces its own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        sweep_interval_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of requests per window.
            window_seconds: Window length in seconds.
            sweep_interval_seconds: Minimum time between eviction sweeps of
                expired windows. Defaults to ``window_seconds``.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If any size argument is invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")
        if sweep_interval_seconds is not None and sweep_interval_seconds < 1:
            raise ValueError("sweep_interval_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._sweep_interval = sweep_interval_seconds or window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}
        self._next_sweep_at = clock() + self._sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _sweep_expired(self, now: float) -> None:
        """Drop windows that have already expired. Caller holds the lock."""
        if now < self._next_sweep_at:
            return
        expired = [key for key, state in self._state_by_key.items() if now >= state.reset_at]
        for key in expired:
            del self._state_by_key[key]
        self._next_sweep_at = now + self._sweep_interval

    def _blocked(self, now: float, state: _WindowState) -> RateLimitResult:
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=int(math.ceil(state.reset_at)),
            retry_after_seconds=max(1, int(math.ceil(state.reset_at - now))),
        )

    def _allowed(self, state: _WindowState) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=max(0, self._limit - state.count),
            reset_at=int(math.ceil(state.reset_at)),
            retry_after_seconds=None,
        )

    def consume(self, key: str) -> RateLimitResult:
        """Count a request for ``key`` if the window still has room.

        Args:
            key: Client identifier.

        Returns:
            RateLimitResult with the decision and window metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            self._sweep_expired(now)

            state = self._state_by_key.get(key)
            if state is None or now >= state.reset_at:
                state = _WindowState(count=1, reset_at=now + self._window_seconds)
                self._state_by_key[key] = state
                return self._allowed(state)

            if state.count >= self._limit:
                return self._blocked(now, state)

            state.count += 1
            return self._allowed(state)
