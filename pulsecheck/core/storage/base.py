"""
Base interfaces for storage components.

Source clients depend on BaseCache only, so the in-process TTL cache
can be swapped without changing client code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheConfig:
    """
    Configuration for a result cache.

    ttl: Seconds an entry stays valid. 0 disables caching.
    max_entries: Upper bound on stored entries (least recently used
        are evicted first). None means unbounded.
    """

    ttl: float = 300.0
    max_entries: int | None = 1024


class BaseCache(ABC):
    """
    Abstract base class for cache operations.

    Usage:
        cache = SomeCache(config)

        cache.set("hn:stories:notion:20:relevance", result)
        value = cache.get("hn:stories:notion:20:relevance")

        cache.clear()
    """

    def __init__(self, config: CacheConfig):
        """Initialize with configuration."""
        self.config = config

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Get value by key. Returns None on a miss or an expired entry."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns True if key existed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""
        pass
