"""
Notifier: delivers NotificationEvents to subscriber chats.

Delivery is best-effort and at-most-once: a failed send is logged and dropped.
It never aborts the cycle and never rolls back the balance store.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol

from telegram.error import TelegramError

from balance_watch.core.exceptions import NotificationDeliveryError
from balance_watch.watch_logging import get_logger

if TYPE_CHECKING:
    from balance_watch.monitor.events import NotificationEvent

logger = get_logger(__name__)


class Notifier(Protocol):
    async def deliver(self, event: NotificationEvent) -> bool:
        ...


class TelegramNotifier:
    """Send events as plain-text chat messages through a python-telegram-bot Bot."""

    def __init__(self, bot: Any, *, token_symbol: str = "ES") -> None:
        self._bot = bot
        self._symbol = token_symbol

    async def send(self, chat_id: Any, text: str) -> None:
        try:
            await self._bot.send_message(chat_id=chat_id, text=text)
        except TelegramError as e:
            raise NotificationDeliveryError(f"send_message to {chat_id} failed: {e}") from e

    async def deliver(self, event: NotificationEvent) -> bool:
        from balance_watch.monitor.events import format_event

        try:
            await self.send(event.subscriber, format_event(event, self._symbol))
        except NotificationDeliveryError as e:
            logger.warning(
                "notify_delivery_failed",
                subscriber=event.subscriber,
                address=event.address,
                kind=event.kind.value,
                error=str(e),
            )
            return False
        logger.info(
            "notify_delivered",
            subscriber=event.subscriber,
            address=event.address,
            kind=event.kind.value,
        )
        return True


async def dispatch(notifier: Notifier, events: Iterable[NotificationEvent]) -> tuple[int, int]:
    """
    Deliver events in order. Returns (delivered, failed).

    Exceptions from a notifier are isolated per event.
    """
    delivered = 0
    failed = 0
    for event in events:
        try:
            ok = await notifier.deliver(event)
        except Exception as e:
            logger.exception(
                "notify_dispatch_error",
                subscriber=event.subscriber,
                address=event.address,
                error=str(e),
            )
            ok = False
        if ok:
            delivered += 1
        else:
            failed += 1
    return delivered, failed
