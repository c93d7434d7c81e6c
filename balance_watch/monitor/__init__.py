"""
Balance-monitoring engine.

Registry of tracked addresses per chat, address-scoped balance store, the
ledger probe, and the polling cycle that diffs balances and emits events.
"""

from balance_watch.monitor.events import EventKind, NotificationEvent, format_event
from balance_watch.monitor.store import BalanceDiff, BalanceRecord, BalanceStore
from balance_watch.monitor.registry import SubscriptionRegistry
from balance_watch.monitor.probe import BalanceProbe, ProbeFailure, ProbeResult
from balance_watch.monitor.cycle import CycleReport, CycleState, MonitorCycle, SubscribeOutcome

__all__ = [
    "BalanceDiff",
    "BalanceProbe",
    "BalanceRecord",
    "BalanceStore",
    "CycleReport",
    "CycleState",
    "EventKind",
    "MonitorCycle",
    "NotificationEvent",
    "ProbeFailure",
    "ProbeResult",
    "SubscribeOutcome",
    "SubscriptionRegistry",
    "format_event",
]
