"""
MonitorCycle: the polling engine.

One cycle: snapshot the registry, probe every tracked address (once per cycle,
bounded concurrency), write each successful probe to the store, turn the diffs
into NotificationEvents for every subscriber tracking the address, then hand the
events to the notifier in the order they were generated.

Cycles never overlap: a trigger that fires while a cycle is running is skipped.
Probe failures are isolated per address; the next cycle is the retry.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from balance_watch.alerts.notifier import Notifier, dispatch
from balance_watch.monitor.events import EventKind, NotificationEvent
from balance_watch.monitor.probe import BalanceProbe, ProbeFailure, ProbeResult
from balance_watch.monitor.registry import SubscriptionRegistry, group_by_address
from balance_watch.monitor.store import BalanceDiff, BalanceStore
from balance_watch.utils.wallet_utils import parse_address
from balance_watch.watch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_CONCURRENT_PROBES = 8


class CycleState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass
class CycleReport:
    """Counters for one cycle; skipped=True when it did not run because another was running."""

    cycle: int = 0
    addresses: int = 0
    probe_failures: int = 0
    events: list[NotificationEvent] = field(default_factory=list)
    delivered: int = 0
    delivery_failures: int = 0
    skipped: bool = False


@dataclass(frozen=True)
class SubscribeOutcome:
    address: str
    added: bool
    probe: ProbeResult | ProbeFailure
    events: tuple[NotificationEvent, ...] = ()


def events_for_diff(diff: BalanceDiff, subscribers: Iterable[Hashable]) -> list[NotificationEvent]:
    """Account-created event first (if any), then balance-changed, per subscriber."""
    events: list[NotificationEvent] = []
    for subscriber in subscribers:
        if diff.new_account_detected:
            events.append(
                NotificationEvent(
                    kind=EventKind.ACCOUNT_CREATED,
                    subscriber=subscriber,
                    address=diff.address,
                    previous_balance=diff.previous,
                    current_balance=diff.current,
                    delta=diff.delta,
                    token_account=diff.token_account,
                )
            )
        if diff.changed:
            events.append(
                NotificationEvent(
                    kind=EventKind.BALANCE_CHANGED,
                    subscriber=subscriber,
                    address=diff.address,
                    previous_balance=diff.previous,
                    current_balance=diff.current,
                    delta=diff.delta,
                    token_account=diff.token_account,
                )
            )
    return events


class MonitorCycle:
    def __init__(
        self,
        registry: SubscriptionRegistry,
        store: BalanceStore,
        probe: BalanceProbe,
        notifier: Notifier,
        *,
        max_concurrent_probes: int = DEFAULT_MAX_CONCURRENT_PROBES,
    ) -> None:
        self.registry = registry
        self.store = store
        self.probe = probe
        self.notifier = notifier
        self._semaphore = asyncio.Semaphore(max(1, int(max_concurrent_probes)))
        self._running = asyncio.Lock()
        self._cycle = 0

    @property
    def state(self) -> CycleState:
        return CycleState.RUNNING if self._running.locked() else CycleState.IDLE

    async def _probe_bounded(self, address: str) -> ProbeResult | ProbeFailure:
        async with self._semaphore:
            return await self.probe.probe(address)

    async def _probe_and_write(
        self,
        address: str,
        *,
        seed: bool = False,
    ) -> tuple[ProbeResult | ProbeFailure, BalanceDiff | None]:
        """Probe address and write the result while holding its store lock."""
        async with self.store.locked(address):
            result = await self._probe_bounded(address)
            if not result.ok:
                return result, None
            write = self.store.record_seed if seed else self.store.update
            return result, await write(address, result.balance, result.token_account)

    async def _check_address(
        self,
        address: str,
        subscribers: list[Hashable],
    ) -> tuple[list[NotificationEvent], bool]:
        """Probe one address and return (events, probe_ok). Store untouched on failure."""
        result, diff = await self._probe_and_write(address)
        if diff is None:
            logger.info("cycle_address_skipped", address=address, error=result.error)
            return [], False
        if diff.new_account_detected:
            logger.info("cycle_new_token_account", address=address, token_account=diff.token_account)
        return events_for_diff(diff, subscribers), True

    async def run_once(self) -> CycleReport:
        """Run one cycle unless one is already running (then return a skipped report)."""
        if self._running.locked():
            logger.warning("cycle_skipped_overlap", cycle=self._cycle)
            return CycleReport(cycle=self._cycle, skipped=True)

        async with self._running:
            self._cycle += 1
            report = CycleReport(cycle=self._cycle)
            started = time.monotonic()
            logger.info("cycle_started", cycle=self._cycle)

            by_address = group_by_address(await self.registry.snapshot())
            report.addresses = len(by_address)
            addresses = list(by_address)
            outcomes = await asyncio.gather(
                *(self._check_address(a, by_address[a]) for a in addresses),
                return_exceptions=True,
            )
            for address, outcome in zip(addresses, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error("cycle_address_error", address=address, error=str(outcome))
                    report.probe_failures += 1
                    continue
                events, ok = outcome
                if not ok:
                    report.probe_failures += 1
                report.events.extend(events)

            report.delivered, report.delivery_failures = await self.notify(report.events)
            logger.info(
                "cycle_done",
                cycle=self._cycle,
                addresses=report.addresses,
                probe_failures=report.probe_failures,
                events=len(report.events),
                delivered=report.delivered,
                delivery_failures=report.delivery_failures,
                duration_sec=round(time.monotonic() - started, 3),
            )
            return report

    async def notify(self, events: Iterable[NotificationEvent]) -> tuple[int, int]:
        """Deliver events in order; returns (delivered, failed)."""
        return await dispatch(self.notifier, list(events))

    async def seed(self, addresses: Iterable[str]) -> int:
        """
        Seed balances for the startup list. No subscriber context: nothing is delivered.

        Invalid addresses and failed probes are logged and skipped. Returns number seeded.
        """
        seeded = 0
        for raw in addresses:
            try:
                address = str(parse_address(raw))
            except ValueError as e:
                logger.error("seed_invalid_address", address=raw, error=str(e))
                continue
            result, diff = await self._probe_and_write(address, seed=True)
            if diff is None:
                logger.error("seed_probe_failed", address=address, error=result.error)
                continue
            if diff.new_account_detected:
                logger.info("seed_new_token_account", address=address, token_account=diff.token_account)
            seeded += 1
        return seeded

    async def subscribe(self, subscriber: Hashable, address: str) -> SubscribeOutcome:
        """
        Register (subscriber, address) and probe it immediately to seed the store.

        Raises InvalidAddress before any state change. A token account not seen
        before yields an account-created event for this subscriber only; the
        events are returned undelivered so the caller can confirm first and
        then pass them to notify().
        """
        added = await self.registry.subscribe(subscriber, address)
        address = str(parse_address(address))
        result, diff = await self._probe_and_write(address, seed=True)
        if diff is None:
            logger.warning("subscribe_probe_failed", subscriber=subscriber, address=address, error=result.error)
            return SubscribeOutcome(address, added, result)

        events: list[NotificationEvent] = []
        if diff.new_account_detected:
            events.append(
                NotificationEvent(
                    kind=EventKind.ACCOUNT_CREATED,
                    subscriber=subscriber,
                    address=address,
                    previous_balance=diff.previous,
                    current_balance=diff.current,
                    delta=diff.delta,
                    token_account=diff.token_account,
                )
            )
        return SubscribeOutcome(address, added, result, tuple(events))
