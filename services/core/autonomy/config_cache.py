"""
CONFIG CACHE - In-memory mirror of persisted key/value configuration

Avoids a store round-trip per policy evaluation. The first read after
construction or invalidate() performs one bulk load; later reads are
served from memory until the next invalidation. No TTL.

Usage:
    cache = ConfigCache(repository)
    repository.add_listener(cache.on_store_write)

    raw = await cache.get("agent.autonomous_mode", "false")
"""
import asyncio
from typing import Dict, Optional, Protocol, List

from infrastructure.config_store import ConfigEntry
from logging_config import get_logger

logger = get_logger(__name__)


class ConfigSource(Protocol):
    async def get_all(self) -> List[ConfigEntry]: ...


class ConfigCache:
    """
    Process-local cache of config values.

    Bulk loads are serialized on an asyncio.Lock so concurrent readers
    on the event loop trigger at most one load. A failed load propagates
    the store error and leaves the cache unloaded.
    """

    def __init__(self, source: ConfigSource):
        self._source = source
        self._values: Dict[str, str] = {}
        self._loaded = False
        self._generation = 0
        self._lock = asyncio.Lock()
        self.load_count = 0

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    async def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        await self._ensure_loaded()
        return self._values.get(key, default)

    async def snapshot(self) -> Dict[str, str]:
        await self._ensure_loaded()
        return dict(self._values)

    def invalidate(self) -> None:
        """Drop all cached values; the next read reloads from the store"""
        self._values = {}
        self._loaded = False
        self._generation += 1
        logger.debug("config_cache_invalidated")

    def on_store_write(self, entry: ConfigEntry) -> None:
        """Store write listener"""
        self.invalidate()

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._lock:
            while not self._loaded:
                generation = self._generation
                entries = await self._source.get_all()
                if generation != self._generation:
                    # invalidated mid-load, result may predate the write
                    continue
                self._values = {entry.key: entry.value for entry in entries}
                self._loaded = True
                self.load_count += 1
                logger.debug("config_cache_loaded", keys=len(self._values))
