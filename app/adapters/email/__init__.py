from app.adapters.email.base import AbstractNotifier
from app.adapters.email.factory import create_notifier

__all__ = ["AbstractNotifier", "create_notifier"]
