"""Waitlist store interface.

Implementations must enforce uniqueness of ``email`` themselves (e.g., a DB
unique constraint) and report violations as ``DuplicateEmailAppError`` so a
race past the pre-insert lookup is handled the same way as a plain duplicate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.schemas.waitlist import WaitlistEntry


class AbstractWaitlistStore(ABC):
    """Persistence operations required by the signup workflow."""

    @abstractmethod
    def insert(self, email: str) -> WaitlistEntry:
        """Persist a new entry; the store assigns ``id`` and ``created_at``.

        Raises:
            DuplicateEmailAppError: If the email violates the uniqueness constraint.
            StorageAppError: On any other backend failure.
        """
        raise NotImplementedError

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        """Return True if an entry with exactly this email exists."""
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the total number of entries."""
        raise NotImplementedError
