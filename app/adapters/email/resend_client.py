"""Resend email adapter."""

import logging

import resend

from app.adapters.email.base import AbstractNotifier
from app.adapters.email.templates import build_welcome_message
from app.core.errors import NotificationAppError
from app.core.logging import hash_for_log

logger = logging.getLogger(__name__)


class ResendNotifier(AbstractNotifier):
    """Sends welcome emails through the Resend API.

    Uses the official ``resend`` SDK, which is synchronous; callers are
    expected to run ``send`` off the request path.
    """

    def __init__(
        self,
        api_key: str,
        from_email: str,
        early_bird_threshold: int = 100,
    ) -> None:
        """Configure the Resend SDK.

        Args:
            api_key: Resend API key.
            from_email: Sender address, e.g. ``"Vendra <hello@vendra.ng>"``.
            early_bird_threshold: Highest position receiving the early-bird variant.
        """
        resend.api_key = api_key
        self.from_email = from_email
        self.early_bird_threshold = early_bird_threshold

    def send(self, email: str, position: int) -> None:
        message = build_welcome_message(
            position, early_bird_threshold=self.early_bird_threshold
        )
        try:
            resend.Emails.send(
                {
                    "from": self.from_email,
                    "to": [email],
                    "subject": message.subject,
                    "html": message.html,
                }
            )
        except Exception as exc:
            raise NotificationAppError(
                code="email_send_failed",
                message=f"Resend rejected welcome email: {exc}",
            ) from exc

        logger.info(
            "notification.sent",
            extra={
                "email_hash": hash_for_log(email),
                "position": position,
                "early_bird": message.early_bird,
            },
        )


class LoggingNotifier(AbstractNotifier):
    """Fallback used when no email provider is configured: logs and skips."""

    def send(self, email: str, position: int) -> None:
        logger.warning(
            "notification.skipped",
            extra={
                "reason": "resend_api_key_not_configured",
                "email_hash": hash_for_log(email),
                "position": position,
            },
        )
