"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports ``app.core.config`` so
the global settings never point at a real database or email provider.
"""

import os
import threading
from datetime import datetime, timezone
from unittest.mock import Mock
from uuid import uuid4

import pytest

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("RESEND_API_KEY", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.adapters.email.base import AbstractNotifier  # noqa: E402
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter  # noqa: E402
from app.adapters.storage.base import AbstractWaitlistStore  # noqa: E402
from app.core.errors import DuplicateEmailAppError, NotificationAppError  # noqa: E402
from app.schemas.waitlist import DUPLICATE_EMAIL_MESSAGE, WaitlistEntry  # noqa: E402
from app.services.notification_dispatcher import NotificationDispatcher  # noqa: E402
from app.services.waitlist_service import WaitlistService  # noqa: E402


class InMemoryWaitlistStore(AbstractWaitlistStore):
    """Thread-safe store double enforcing email uniqueness on insert.

    ``lookup_barrier`` holds every caller of ``exists_by_email`` until all
    parties arrive, which forces concurrent submissions past the pre-check.
    """

    def __init__(self, existing: int = 0, lookup_barrier: threading.Barrier | None = None) -> None:
        self._lock = threading.Lock()
        self.entries: dict[str, WaitlistEntry] = {}
        self.insert_calls = 0
        self.lookup_calls = 0
        self.count_calls = 0
        self.lookup_barrier = lookup_barrier
        for i in range(existing):
            self._add(f"seed{i}@example.com")

    def _add(self, email: str) -> WaitlistEntry:
        entry = WaitlistEntry(id=str(uuid4()), email=email, created_at=datetime.now(timezone.utc))
        self.entries[email] = entry
        return entry

    def insert(self, email: str) -> WaitlistEntry:
        with self._lock:
            self.insert_calls += 1
            if email in self.entries:
                raise DuplicateEmailAppError(code="duplicate_email", message=DUPLICATE_EMAIL_MESSAGE)
            return self._add(email)

    def exists_by_email(self, email: str) -> bool:
        if self.lookup_barrier is not None:
            self.lookup_barrier.wait(timeout=5)
        with self._lock:
            self.lookup_calls += 1
            return email in self.entries

    def count(self) -> int:
        with self._lock:
            self.count_calls += 1
            return len(self.entries)


class RecordingNotifier(AbstractNotifier):
    """Notifier double that records every send and can be told to fail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, int]] = []
        self._lock = threading.Lock()

    def send(self, email: str, position: int) -> None:
        with self._lock:
            self.sent.append((email, position))
        if self.fail:
            raise NotificationAppError(code="email_send_failed", message="provider down")


@pytest.fixture
def clock() -> Mock:
    return Mock(return_value=1_000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(limit=3, window_seconds=60, clock=clock)


@pytest.fixture
def store() -> InMemoryWaitlistStore:
    return InMemoryWaitlistStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier: RecordingNotifier):
    dispatcher = NotificationDispatcher(notifier, max_workers=1)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def service(
    store: InMemoryWaitlistStore,
    limiter: InMemoryFixedWindowRateLimiter,
    dispatcher: NotificationDispatcher,
) -> WaitlistService:
    return WaitlistService(store=store, limiter=limiter, dispatcher=dispatcher)
