"""Factory for the welcome email notifier."""

from app.adapters.email.base import AbstractNotifier
from app.adapters.email.resend_client import LoggingNotifier, ResendNotifier
from app.core.config import Settings, settings as default_settings


def create_notifier(config: Settings | None = None) -> AbstractNotifier:
    """Build the notifier described by configuration.

    Returns a Resend-backed notifier when ``RESEND_API_KEY`` is set, otherwise a
    notifier that only logs, so signups keep working without email delivery.

    Args:
        config: Settings to read; defaults to the global settings.

    Returns:
        AbstractNotifier: Configured notifier instance.
    """
    cfg = config or default_settings

    if not cfg.email.api_key:
        return LoggingNotifier()

    return ResendNotifier(
        api_key=cfg.email.api_key,
        from_email=cfg.email.from_email,
        early_bird_threshold=cfg.app.early_bird_threshold,
    )
