"""
Users service caching package.

Holds the cache contract the user fetch service depends on and the
in-process TTL implementation used by default. Entries are short-lived and
never outlive the process.
"""

from .base import CacheBackend
from .memory_cache import MemoryCache

__all__ = ["CacheBackend", "MemoryCache"]
