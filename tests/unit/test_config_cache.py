"""
CONFIG CACHE TESTS

Single bulk load, explicit invalidation, store write listener.
"""
import asyncio

import pytest

from autonomy.config_cache import ConfigCache
from exceptions import ConfigPersistenceError
from fakes import FakeConfigStore

pytestmark = pytest.mark.asyncio(loop_scope="function")


class TestLoading:

    async def test_first_read_loads_once(self):
        store = FakeConfigStore({"agent.autonomous_mode": "true"})
        cache = ConfigCache(store)

        assert cache.is_loaded is False
        assert await cache.get("agent.autonomous_mode") == "true"
        assert await cache.get("agent.prod_mode", "false") == "false"
        assert await cache.snapshot() == {"agent.autonomous_mode": "true"}

        assert store.get_all_calls == 1
        assert cache.load_count == 1

    async def test_concurrent_readers_share_one_load(self):
        store = FakeConfigStore({"a": "1"})
        cache = ConfigCache(store)

        results = await asyncio.gather(*(cache.get("a") for _ in range(10)))

        assert results == ["1"] * 10
        assert store.get_all_calls == 1

    async def test_failed_load_propagates_and_stays_unloaded(self):
        store = FakeConfigStore({"a": "1"})
        store.fail_reads = True
        cache = ConfigCache(store)

        with pytest.raises(ConfigPersistenceError):
            await cache.get("a")
        assert cache.is_loaded is False

        store.fail_reads = False
        assert await cache.get("a") == "1"

    async def test_invalidation_during_load_triggers_reload(self):
        store = FakeConfigStore({"a": "1"})
        cache = ConfigCache(store)

        def concurrent_write():
            store._put("a", "2", None, "other-process")
            cache.invalidate()

        store.on_get_all = concurrent_write

        assert await cache.get("a") == "2"
        assert store.get_all_calls == 2
        assert cache.load_count == 1


class TestInvalidation:

    async def test_invalidate_forces_reload(self):
        store = FakeConfigStore({"a": "1"})
        cache = ConfigCache(store)
        await cache.get("a")

        cache.invalidate()
        assert cache.is_loaded is False

        await cache.get("a")
        assert store.get_all_calls == 2

    async def test_store_write_listener_invalidates(self):
        store = FakeConfigStore({"a": "1"})
        cache = ConfigCache(store)
        store.add_listener(cache.on_store_write)
        assert await cache.get("a") == "1"

        await store.update("a", "2", "admin")

        assert cache.is_loaded is False
        assert await cache.get("a") == "2"

    async def test_distinct_caches_are_independent(self):
        store = FakeConfigStore({"a": "1"})
        first, second = ConfigCache(store), ConfigCache(store)
        await first.get("a")
        await second.get("a")

        first.invalidate()

        assert first.is_loaded is False
        assert second.is_loaded is True
