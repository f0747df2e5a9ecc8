"""
In-process TTL cache for user directory responses.
"""

import threading
import time
from typing import Any, Callable, NamedTuple, Optional

from cachetools import TLRUCache

from shared.logging import get_logger
from .base import CacheBackend


DEFAULT_MAX_ENTRIES = 1024


class _Entry(NamedTuple):
    value: Any
    ttl_seconds: float


def _time_to_use(key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl_seconds


class MemoryCache(CacheBackend):
    """Memory-backed cache with a per-entry TTL and a size bound.

    Expired entries read as absent. Once ``max_entries`` is reached an entry
    is evicted to make room.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, timer: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self.logger = get_logger("users.cache.memory")
        self._store = TLRUCache(maxsize=max_entries, ttu=_time_to_use, timer=timer)
        self._lock = threading.RLock()

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
        if entry is None:
            self.logger.debug("Cache miss", key=key)
            return None
        self.logger.debug("Cache hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._store[key] = _Entry(value, ttl_seconds)
        self.logger.debug("Cached value", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._store.clear()
        self.logger.info("Cleared memory cache")

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)
