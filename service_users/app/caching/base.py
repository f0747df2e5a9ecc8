"""
Cache backend contract used by the Users service.
"""

import abc
from typing import Any, Optional


class CacheBackend(abc.ABC):
    """Key/value store with per-entry time-to-live.

    Implementations must tolerate concurrent calls from several coroutines;
    callers take no locks of their own.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key``, or None if absent or expired."""

    @abc.abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds`` from now."""

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abc.abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
