"""
Test fixtures for storage tests.

Provides a TTL cache driven by a manual clock, so expiry is tested
without waiting.
"""

import pytest

from pulsecheck.core.storage.base import CacheConfig
from pulsecheck.core.storage.memory_cache import TTLCache


class ManualClock:
    """Monotonic clock advanced explicitly by tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at t=1000s."""
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> TTLCache:
    """TTL cache with a 60 second ttl and room for 3 entries."""
    return TTLCache(CacheConfig(ttl=60.0, max_entries=3), clock=clock)
