"""
Alert delivery: turns NotificationEvents into chat messages.

Best-effort, at-most-once: failures are logged and never roll back monitor state.
"""

from balance_watch.alerts.notifier import Notifier, TelegramNotifier, dispatch

__all__ = [
    "Notifier",
    "TelegramNotifier",
    "dispatch",
]
