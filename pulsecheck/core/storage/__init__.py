"""
Storage module: result caching for source clients.

Usage:
    from pulsecheck.core.storage import CacheConfig, TTLCache

    cache = TTLCache(CacheConfig(ttl=300))
    cache.set("key", value)
"""

from pulsecheck.core.storage.base import BaseCache, CacheConfig
from pulsecheck.core.storage.memory_cache import CacheEntry, TTLCache

__all__ = [
    "BaseCache",
    "CacheConfig",
    "CacheEntry",
    "TTLCache",
]
