"""
Tests for TelegramNotifier, dispatch, and the chat message format.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from telegram.error import NetworkError

from balance_watch.alerts.notifier import TelegramNotifier, dispatch
from balance_watch.monitor.events import EventKind, NotificationEvent, format_event

ADDR = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


def _change(subscriber=1, previous="5", current="7.5") -> NotificationEvent:
    prev, cur = Decimal(previous), Decimal(current)
    return NotificationEvent(
        kind=EventKind.BALANCE_CHANGED,
        subscriber=subscriber,
        address=ADDR,
        previous_balance=prev,
        current_balance=cur,
        delta=cur - prev,
    )


def test_format_balance_change():
    text = format_event(_change(current="7.500000"), "ES")
    assert text == (
        f"Balance change detected for {ADDR}:\n"
        "Previous: 5 ES\n"
        "Current: 7.5 ES\n"
        "Change: +2.5 ES"
    )


def test_format_negative_change_and_zero():
    text = format_event(_change(previous="5", current="0E-6"))
    assert "Current: 0 ES" in text
    assert "Change: -5 ES" in text


def test_format_account_created():
    event = NotificationEvent(
        kind=EventKind.ACCOUNT_CREATED,
        subscriber=1,
        address=ADDR,
        previous_balance=Decimal(0),
        current_balance=Decimal(5),
        delta=Decimal(5),
        token_account="TA111",
    )
    assert format_event(event) == f"New token account created for {ADDR}: TA111"


def test_telegram_notifier_sends_message():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    notifier = TelegramNotifier(bot, token_symbol="ES")
    assert asyncio.run(notifier.deliver(_change(subscriber=42))) is True
    bot.send_message.assert_awaited_once()
    kwargs = bot.send_message.await_args.kwargs
    assert kwargs["chat_id"] == 42
    assert kwargs["text"].startswith("Balance change detected")


def test_telegram_notifier_failure_returns_false():
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=NetworkError("timeout"))
    notifier = TelegramNotifier(bot)
    assert asyncio.run(notifier.deliver(_change())) is False


def test_dispatch_isolates_failures_and_keeps_order():
    seen = []

    class FlakyNotifier:
        async def deliver(self, event):
            seen.append(event.subscriber)
            if event.subscriber == 2:
                raise RuntimeError("sink exploded")
            return event.subscriber != 3

    events = [_change(subscriber=s) for s in (1, 2, 3, 4)]
    delivered, failed = asyncio.run(dispatch(FlakyNotifier(), events))
    assert seen == [1, 2, 3, 4]
    assert (delivered, failed) == (2, 2)
