"""
Notification events produced by the monitor and their chat message text.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from balance_watch.watch_logging import render_amount


class EventKind(str, Enum):
    BALANCE_CHANGED = "balance_changed"
    ACCOUNT_CREATED = "account_created"


@dataclass(frozen=True)
class NotificationEvent:
    """One message for one subscriber. Produced and consumed within a cycle; never stored."""

    kind: EventKind
    subscriber: Hashable
    address: str
    previous_balance: Decimal
    current_balance: Decimal
    delta: Decimal
    token_account: str | None = None


format_amount = render_amount


def format_delta(value: Decimal) -> str:
    text = format_amount(value)
    return f"+{text}" if value > 0 else text


def format_event(event: NotificationEvent, symbol: str = "ES") -> str:
    """Render the chat message for an event."""
    if event.kind is EventKind.ACCOUNT_CREATED:
        return f"New token account created for {event.address}: {event.token_account}"
    return (
        f"Balance change detected for {event.address}:\n"
        f"Previous: {format_amount(event.previous_balance)} {symbol}\n"
        f"Current: {format_amount(event.current_balance)} {symbol}\n"
        f"Change: {format_delta(event.delta)} {symbol}"
    )
