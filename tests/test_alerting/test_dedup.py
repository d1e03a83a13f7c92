"""Tests for report-identity deduplication."""

import pytest

from stableguard.alerting.dedup import InMemoryDedupStore


@pytest.mark.asyncio
async def test_first_claim_wins():
    store = InMemoryDedupStore()
    assert await store.claim("1750000000:USDC") is True
    assert await store.claim("1750000000:USDC") is False
    assert "1750000000:USDC" in store


@pytest.mark.asyncio
async def test_oldest_keys_evicted():
    store = InMemoryDedupStore(max_entries=2)
    for key in ("a", "b", "c"):
        await store.claim(key)
    assert len(store) == 2
    assert "a" not in store
    assert await store.claim("a") is True


@pytest.mark.asyncio
async def test_reset():
    store = InMemoryDedupStore()
    await store.claim("k")
    store.reset()
    assert len(store) == 0
