"""
Pytest fixtures for Balance Watch tests. In-memory fake ledger and recording notifier;
no network access.
"""

from __future__ import annotations

import struct

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from balance_watch.core.exceptions import LedgerError
from balance_watch.ledger.models import TokenAccountState
from balance_watch.ledger.token_accounts import derive_associated_token_address

# Deterministic on-curve owners (keypair pubkeys) and a mint
OWNER_1 = str(Keypair.from_seed(bytes([1] * 32)).pubkey())
OWNER_2 = str(Keypair.from_seed(bytes([2] * 32)).pubkey())
OWNER_3 = str(Keypair.from_seed(bytes([3] * 32)).pubkey())
MINT = str(Keypair.from_seed(bytes([9] * 32)).pubkey())


def make_token_account_data(mint: str, owner: str, amount: int, *, state: int = 1) -> bytes:
    """Build a 165-byte base token account."""
    data = (
        bytes(Pubkey.from_string(mint))
        + bytes(Pubkey.from_string(owner))
        + struct.pack("<Q", amount)
        + b"\x00" * 36  # delegate: None
        + bytes([state])
        + b"\x00" * 12  # is_native: None
        + struct.pack("<Q", 0)
        + b"\x00" * 36  # close_authority: None
    )
    assert len(data) == 165
    return data


class FakeLedger:
    """Token accounts keyed by owner; an Exception value is raised on fetch."""

    def __init__(self, mint: str = MINT) -> None:
        self.mint = Pubkey.from_string(mint)
        self._accounts: dict[str, object] = {}
        self.calls: list[str] = []

    def token_account(self, owner: str) -> str:
        return str(derive_associated_token_address(Pubkey.from_string(owner), self.mint))

    def set_amount(self, owner: str, amount: int) -> None:
        address = self.token_account(owner)
        self._accounts[address] = TokenAccountState(
            address=address,
            mint=str(self.mint),
            owner=owner,
            amount=amount,
            delegate=None,
            state=1,
            delegated_amount=0,
            close_authority=None,
        )

    def fail(self, owner: str, error: Exception | None = None) -> None:
        self._accounts[self.token_account(owner)] = error or LedgerError("rpc unavailable")

    def remove(self, owner: str) -> None:
        self._accounts.pop(self.token_account(owner), None)

    async def fetch_token_account(self, token_account, program_id=None):
        key = str(token_account)
        self.calls.append(key)
        value = self._accounts.get(key)
        if isinstance(value, Exception):
            raise value
        return value


class RecordingNotifier:
    """Collects delivered events; subscribers in fail_for are reported as failed."""

    def __init__(self, fail_for: set | None = None) -> None:
        self.delivered: list = []
        self.fail_for = fail_for or set()

    async def deliver(self, event) -> bool:
        if event.subscriber in self.fail_for:
            return False
        self.delivered.append(event)
        return True


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def probe(ledger):
    from balance_watch.monitor.probe import BalanceProbe

    return BalanceProbe(ledger, MINT, decimals=6, timeout_sec=2.0)


@pytest.fixture
def monitor(ledger, notifier, probe):
    """MonitorCycle over a fresh registry and store, fake ledger, recording notifier."""
    from balance_watch.monitor.cycle import MonitorCycle
    from balance_watch.monitor.registry import SubscriptionRegistry
    from balance_watch.monitor.store import BalanceStore

    return MonitorCycle(SubscriptionRegistry(), BalanceStore(), probe, notifier, max_concurrent_probes=4)
