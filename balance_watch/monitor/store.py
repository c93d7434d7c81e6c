"""
BalanceStore: address to last observed balance and known token accounts.

Address-scoped, not (subscriber, address)-scoped: every chat tracking an address
sees the same record. Records are created on the first successful probe and
never deleted. Callers hold locked(address) across the probe and the write it
produces, so a slow probe cannot overwrite a newer value for the same address.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal

from balance_watch.watch_logging import get_logger

logger = get_logger(__name__)

ZERO = Decimal(0)


@dataclass(frozen=True)
class BalanceRecord:
    address: str
    last_balance: Decimal | None
    known_token_accounts: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class BalanceDiff:
    """
    Outcome of one write.

    previous is 0 when the address had no record (or an unknown balance);
    changed uses exact Decimal equality.
    """

    address: str
    changed: bool
    previous: Decimal
    current: Decimal
    new_account_detected: bool
    token_account: str | None = None

    @property
    def delta(self) -> Decimal:
        return self.current - self.previous


class BalanceStore:
    def __init__(self) -> None:
        self._records: dict[str, BalanceRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def locked(self, address: str) -> asyncio.Lock:
        """Per-address lock; hold it from probe start until the write returns."""
        lock = self._locks.get(address)
        if lock is None:
            lock = self._locks[address] = asyncio.Lock()
        return lock

    def get(self, address: str) -> BalanceRecord | None:
        return self._records.get(address)

    def snapshot(self) -> dict[str, BalanceRecord]:
        return dict(self._records)

    def __contains__(self, address: object) -> bool:
        return address in self._records

    def __len__(self) -> int:
        return len(self._records)

    async def record_seed(
        self,
        address: str,
        balance: Decimal,
        token_account: str | None = None,
    ) -> BalanceDiff:
        """Seed from the startup list or a new subscription; same write rules as update()."""
        diff = self._write(address, balance, token_account)
        logger.info(
            "store_seeded",
            address=address,
            balance=balance,
            token_account=token_account,
        )
        return diff

    async def update(
        self,
        address: str,
        balance: Decimal,
        token_account: str | None = None,
    ) -> BalanceDiff:
        """Write the result of a successful probe and return what changed."""
        diff = self._write(address, balance, token_account)
        if diff.changed:
            logger.info(
                "store_balance_changed",
                address=address,
                previous=diff.previous,
                current=diff.current,
            )
        else:
            logger.debug("store_balance_unchanged", address=address, balance=balance)
        return diff

    def _write(
        self,
        address: str,
        balance: Decimal,
        token_account: str | None,
    ) -> BalanceDiff:
        current = Decimal(balance)
        prior = self._records.get(address)
        previous = ZERO
        known: frozenset[str] = frozenset()
        if prior is not None:
            known = prior.known_token_accounts
            if prior.last_balance is not None:
                previous = prior.last_balance
        new_account = token_account is not None and token_account not in known
        self._records[address] = BalanceRecord(
            address=address,
            last_balance=current,
            known_token_accounts=frozenset([token_account]) if token_account else frozenset(),
        )
        return BalanceDiff(
            address=address,
            changed=current != previous,
            previous=previous,
            current=current,
            new_account_detected=new_account,
            token_account=token_account,
        )
