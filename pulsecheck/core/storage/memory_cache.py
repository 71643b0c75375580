"""
In-process TTL cache.

Maps a request signature to a previously fetched result for a bounded
time. Expired entries are discarded lazily when read; there is no
background sweep.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pulsecheck.core.storage.base import BaseCache, CacheConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Stored value with the clock reading taken when it was inserted."""

    value: Any
    inserted_at: float


class TTLCache(BaseCache):
    """
    TTL cache with optional LRU bound.

    Usage:
        cache = TTLCache(CacheConfig(ttl=300))

        cache.set("hn:comments:12345:30", comments)
        comments = cache.get("hn:comments:12345:30")

        cache.clear()

    A get misses when no entry exists or when the entry's age is >= ttl.
    With ttl == 0 nothing is stored. The entry map is guarded by a lock,
    so one instance may be shared by tasks on several threads.
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            config: Cache configuration.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        super().__init__(config or CacheConfig())
        if self.config.ttl < 0:
            raise ValueError(f"Cache ttl must be >= 0, got {self.config.ttl}")
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        """False when ttl is zero and every lookup misses."""
        return self.config.ttl > 0

    def get(self, key: str) -> Any | None:
        """Get value by key. Returns None if missing or expired."""
        if not self.enabled:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if self._clock() - entry.inserted_at >= self.config.ttl:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None

            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value, replacing any previous entry for key."""
        if not self.enabled:
            return

        with self._lock:
            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
            self._entries.move_to_end(key)

            max_entries = self.config.max_entries
            if max_entries is not None:
                while len(self._entries) > max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug(f"Cache full, evicted: {evicted}")

    def delete(self, key: str) -> bool:
        """Delete key. Returns True if key existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Cache cleared ({count} entries)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
