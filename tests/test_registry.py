"""
Tests for SubscriptionRegistry: set semantics, validation, snapshots.
"""

from __future__ import annotations

import asyncio

import pytest

from balance_watch.core.exceptions import InvalidAddress
from balance_watch.monitor.registry import SubscriptionRegistry, group_by_address
from conftest import OWNER_1, OWNER_2


def test_subscribe_is_idempotent():
    registry = SubscriptionRegistry()

    async def run():
        first = await registry.subscribe(100, OWNER_1)
        second = await registry.subscribe(100, OWNER_1)
        return first, second

    assert asyncio.run(run()) == (True, False)
    assert asyncio.run(registry.snapshot()) == {100: frozenset({OWNER_1})}


def test_concurrent_subscribes_do_not_duplicate():
    registry = SubscriptionRegistry()

    async def run():
        return await asyncio.gather(*(registry.subscribe(100, OWNER_1) for _ in range(10)))

    results = asyncio.run(run())
    assert results.count(True) == 1
    assert asyncio.run(registry.snapshot()) == {100: frozenset({OWNER_1})}


def test_invalid_address_leaves_registry_unchanged():
    registry = SubscriptionRegistry()
    with pytest.raises(InvalidAddress):
        asyncio.run(registry.subscribe(100, "not-a-valid-pubkey"))
    with pytest.raises(ValueError):
        asyncio.run(registry.subscribe(100, ""))
    assert asyncio.run(registry.snapshot()) == {}


def test_grouping_by_address():
    registry = SubscriptionRegistry()

    async def run():
        await registry.subscribe(1, OWNER_1)
        await registry.subscribe(2, OWNER_1)
        await registry.subscribe(2, OWNER_2)
        return await registry.snapshot()

    snapshot = asyncio.run(run())
    grouped = group_by_address(snapshot)
    assert sorted(grouped[OWNER_1]) == [1, 2]
    assert grouped[OWNER_2] == [2]


def test_snapshot_is_a_copy():
    registry = SubscriptionRegistry()

    async def run():
        await registry.subscribe(1, OWNER_1)
        snap = await registry.snapshot()
        await registry.subscribe(1, OWNER_2)
        return snap

    snap = asyncio.run(run())
    assert snap == {1: frozenset({OWNER_1})}
