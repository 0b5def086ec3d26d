"""
AEDCheck Backend — TTL Cache Tests
===================================

What:  Expiry, invalidation and get_or_set behavior of TTLCache.
How:   A fake clock advanced by hand; no sleeps.
"""

from unittest.mock import AsyncMock

import pytest

from aedcheck.services.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache:

    def setup_method(self):
        self.clock = FakeClock()
        self.cache = TTLCache(ttl_seconds=60, clock=self.clock)

    def test_get_before_and_after_expiry(self):
        self.cache.set("k", 1)
        assert self.cache.get("k") == 1

        self.clock.now += 59
        assert self.cache.get("k") == 1

        self.clock.now += 1
        assert self.cache.get("k", "gone") == "gone"
        assert len(self.cache) == 0

    def test_invalidate_and_clear(self):
        self.cache.set("a", 1)
        self.cache.set("b", 2)

        assert self.cache.invalidate("a") is True
        assert self.cache.invalidate("a") is False
        self.cache.clear()
        assert len(self.cache) == 0

    def test_purge_expired(self):
        self.cache.set("old", 1)
        self.clock.now += 30
        self.cache.set("new", 2)
        self.clock.now += 40

        assert self.cache.purge_expired() == 1
        assert self.cache.get("new") == 2

    def test_zero_ttl_disables_caching(self):
        cache = TTLCache(ttl_seconds=0, clock=self.clock)
        cache.set("k", 1)
        assert cache.get("k") is None

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=-1)

    @pytest.mark.asyncio
    async def test_get_or_set_calls_factory_once(self):
        factory = AsyncMock(return_value={"total": 3})

        first = await self.cache.get_or_set("summary", factory)
        second = await self.cache.get_or_set("summary", factory)

        assert first == second == {"total": 3}
        factory.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_or_set_recomputes_after_expiry(self):
        factory = AsyncMock(side_effect=[1, 2])

        assert await self.cache.get_or_set("k", factory) == 1
        self.clock.now += 61
        assert await self.cache.get_or_set("k", factory) == 2

    @pytest.mark.asyncio
    async def test_date_keyed_entries_do_not_accumulate(self):
        factory = AsyncMock(return_value={"total": 0})
        scopes = [("DAE", "중구"), ("DAE", None), ("SEO", None)]
        largest = 0

        for day in range(100):
            for sido, gugun in scopes:
                await self.cache.get_or_set(("expiry_summary", sido, gugun, day), factory)
                largest = max(largest, len(self.cache))
            self.clock.now += 86400

        assert factory.await_count == 300
        assert largest <= TTLCache.PURGE_EVERY
        assert len(self.cache) < TTLCache.PURGE_EVERY
