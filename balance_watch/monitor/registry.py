"""
SubscriptionRegistry: subscriber (chat) to set of tracked addresses.

Mutated only by subscribe(). Readers take a snapshot under the lock and iterate
the copy, so a running cycle never holds the lock while probing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable

from balance_watch.utils.wallet_utils import parse_address
from balance_watch.watch_logging import get_logger

logger = get_logger(__name__)

Subscriber = Hashable


class SubscriptionRegistry:
    def __init__(self) -> None:
        self._addresses: dict[Subscriber, set[str]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, subscriber: Subscriber, address: str) -> bool:
        """
        Track address for subscriber. Returns True if the pair is new.

        Raises InvalidAddress (no state change) when address is not a valid public key.
        """
        address = str(parse_address(address))
        async with self._lock:
            tracked = self._addresses.setdefault(subscriber, set())
            if address in tracked:
                logger.info("registry_already_subscribed", subscriber=subscriber, address=address)
                return False
            tracked.add(address)
        logger.info("registry_subscribed", subscriber=subscriber, address=address)
        return True

    async def snapshot(self) -> dict[Subscriber, frozenset[str]]:
        """Copy of the current subscriber -> addresses mapping."""
        async with self._lock:
            return {sub: frozenset(addrs) for sub, addrs in self._addresses.items()}


def group_by_address(snapshot: dict[Subscriber, frozenset[str]]) -> dict[str, list[Subscriber]]:
    """Invert a registry snapshot: address -> subscribers tracking it."""
    by_address: dict[str, list[Subscriber]] = {}
    for subscriber, addresses in snapshot.items():
        for address in addresses:
            by_address.setdefault(address, []).append(subscriber)
    return by_address
