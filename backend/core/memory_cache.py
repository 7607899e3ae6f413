"""
In-process LRU cache with per-entry TTL.

Used as the storage behind read-through caches (see
modules.menu.services.catalog_cache). Instances are created and passed
explicitly; nothing here is a module-level singleton.
"""

import time
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional
from collections import OrderedDict


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def expired(self, now: float) -> bool:
        return now > self.expires_at


class LRUCache:
    """asyncio-safe LRU cache; the oldest entry goes first when full."""

    def __init__(self, max_size: int = 1000, ttl_seconds: int = 60):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = asyncio.Lock()
        self.stats = {"hits": 0, "misses": 0, "evictions": 0, "expirations": 0}

    def _lookup(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            self.stats["misses"] += 1
            return None
        if entry.expired(time.monotonic()):
            del self._entries[key]
            self.stats["expirations"] += 1
            self.stats["misses"] += 1
            return None
        self._entries.move_to_end(key)
        self.stats["hits"] += 1
        return entry

    def _store(self, key: str, value: Any, ttl: Optional[int]) -> None:
        ttl = self.ttl_seconds if ttl is None else ttl
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
            self.stats["evictions"] += 1
        self._entries[key] = CacheEntry(value, time.monotonic() + ttl)

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._lookup(key)
            return entry.value if entry else None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        async with self._lock:
            self._store(key, value, ttl)

    async def get_or_load(
        self, key: str, loader: Callable[[], Awaitable[Any]], ttl: Optional[int] = None
    ) -> Any:
        """
        Cached value for key, calling loader on a miss.

        The lock is held while loading so concurrent misses on the same
        key do not all hit the database.
        """
        async with self._lock:
            entry = self._lookup(key)
            if entry is not None:
                return entry.value
            value = await loader()
            self._store(key, value, ttl)
            return value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def delete_prefix(self, prefix: str) -> int:
        """Drop every key starting with prefix; returns how many went."""
        async with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        lookups = self.stats["hits"] + self.stats["misses"]
        hit_rate = self.stats["hits"] / lookups * 100 if lookups else 0
        return {
            **self.stats,
            "size": len(self._entries),
            "max_size": self.max_size,
            "hit_rate": f"{hit_rate:.2f}%",
        }
