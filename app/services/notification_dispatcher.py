"""Fire-and-forget dispatch of welcome notifications.

Sends run on a small thread pool owned by the dispatcher. The request that
triggered a send never waits for it, and every failure is caught by the
completion callback and logged, so a broken email provider cannot affect
signups or crash the process.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from app.adapters.email.base import AbstractNotifier
from app.core.errors import AppError
from app.core.logging import get_request_id, hash_for_log

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Supervised background executor for notifier calls."""

    def __init__(self, notifier: AbstractNotifier, *, max_workers: int = 2) -> None:
        self._notifier = notifier
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )

    @property
    def notifier(self) -> AbstractNotifier:
        return self._notifier

    def dispatch(self, email: str, position: int) -> Future | None:
        """Schedule a welcome notification without waiting for it.

        Args:
            email: Recipient address.
            position: Waitlist position passed to the notifier.

        Returns:
            The scheduled future, or None if the dispatcher is shut down.
        """
        email_hash = hash_for_log(email)
        request_id = get_request_id()

        try:
            future = self._executor.submit(self._notifier.send, email, position)
        except RuntimeError:
            # Executor already shut down (application stopping)
            logger.warning(
                "notification.dropped",
                extra={"email_hash": email_hash, "position": position, "request_id": request_id},
            )
            return None

        def _on_done(done: Future) -> None:
            if done.cancelled():
                return
            exc = done.exception()
            if exc is None:
                return
            logger.error(
                "notification.failed",
                extra={
                    "email_hash": email_hash,
                    "position": position,
                    "error_type": type(exc).__name__,
                    "error_code": exc.code if isinstance(exc, AppError) else None,
                    "error_msg": str(exc),
                    "request_id": request_id,
                },
            )

        future.add_done_callback(_on_done)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for in-flight sends."""
        self._executor.shutdown(wait=wait)
