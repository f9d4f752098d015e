"""Tests for the LRU + TTL cache store."""

import time

import pytest

from justbus.data.cache import CacheStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_cache_ttl_expiration():
    """Cache should return None after TTL expires."""
    # Use a very short TTL for testing
    cache: CacheStore[int, str] = CacheStore(ttl=0.1, capacity=10)

    cache.put(1, "test_value")

    # Should be available immediately
    assert cache.peek(1) == "test_value"

    # Wait for TTL to expire
    time.sleep(0.15)

    # Should now return None
    assert cache.peek(1) is None


def test_peek_freshness_boundaries():
    """Value is visible before TTL and absent at or after it (TTL = 1s scenario)."""
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=1.0, capacity=10, clock=clock)

    cache.put(5, "X")

    clock.advance(0.5)
    assert cache.peek(5) == "X"

    clock.advance(0.5)
    assert cache.peek(5) is None

    clock.advance(0.5)
    assert cache.peek(5) is None


def test_capacity_evicts_least_recently_inserted():
    """capacity=2: inserting a third key evicts the first."""
    cache: CacheStore[int, str] = CacheStore(ttl=60.0, capacity=2)

    cache.put(1, "A")
    cache.put(2, "B")
    cache.put(3, "C")

    assert cache.peek(1) is None
    assert cache.peek(2) == "B"
    assert cache.peek(3) == "C"
    assert len(cache) == 2


def test_peek_does_not_promote_recency():
    """A peeked entry is still the LRU victim."""
    cache: CacheStore[int, str] = CacheStore(ttl=60.0, capacity=2)

    cache.put(1, "A")
    cache.put(2, "B")
    assert cache.peek(1) == "A"

    cache.put(3, "C")

    assert cache.peek(1) is None
    assert cache.peek(2) == "B"


def test_get_promotes_recency():
    """A mutating read protects the entry from the next eviction."""
    cache: CacheStore[int, str] = CacheStore(ttl=60.0, capacity=2)

    cache.put(1, "A")
    cache.put(2, "B")
    assert cache.get(1) == "A"

    cache.put(3, "C")

    assert cache.peek(1) == "A"
    assert cache.peek(2) is None
    assert cache.peek(3) == "C"


def test_put_refreshes_existing_entry():
    """Setting an existing key replaces the value and restarts its TTL."""
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=10.0, capacity=10, clock=clock)

    cache.put(1, "first")
    clock.advance(8)
    cache.put(1, "second")
    clock.advance(8)

    assert cache.peek(1) == "second"
    assert len(cache) == 1


def test_put_refresh_moves_entry_to_most_recent():
    """Re-inserting a key makes it the most recently used."""
    cache: CacheStore[int, str] = CacheStore(ttl=60.0, capacity=2)

    cache.put(1, "A")
    cache.put(2, "B")
    cache.put(1, "A2")
    cache.put(3, "C")

    assert cache.peek(1) == "A2"
    assert cache.peek(2) is None


def test_overflow_drops_expired_entries_before_live_ones():
    """Expired entries are purged on overflow ahead of the LRU live entry."""
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=10.0, capacity=2, clock=clock)

    cache.put(1, "A")
    clock.advance(5)
    cache.put(2, "B")
    clock.advance(6)  # key 1 expired, key 2 still live
    cache.put(3, "C")

    assert cache.peek(2) == "B"
    assert cache.peek(3) == "C"
    assert len(cache) == 2


def test_get_purges_expired_entry():
    """get removes an entry it finds expired."""
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=1.0, capacity=10, clock=clock)

    cache.put(1, "A")
    clock.advance(2)

    assert len(cache) == 1
    assert cache.get(1) is None
    assert len(cache) == 0


def test_peek_leaves_expired_entry_in_place():
    """peek never mutates the store."""
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=1.0, capacity=10, clock=clock)

    cache.put(1, "A")
    clock.advance(2)

    assert cache.peek(1) is None
    assert len(cache) == 1


def test_purge_expired_counts_removed_entries():
    clock = FakeClock()
    cache: CacheStore[int, str] = CacheStore(ttl=5.0, capacity=10, clock=clock)

    cache.put(1, "A")
    cache.put(2, "B")
    clock.advance(3)
    cache.put(3, "C")
    clock.advance(3)

    assert cache.purge_expired() == 2
    assert len(cache) == 1
    assert 3 in cache
    assert 1 not in cache


def test_capacity_never_exceeded():
    """Any sequence of puts keeps the entry count within capacity."""
    cache: CacheStore[int, int] = CacheStore(ttl=60.0, capacity=3)

    for key in range(50):
        cache.put(key % 7, key)
        assert len(cache) <= 3

    assert cache.peek(49 % 7) == 49


def test_empty_value_is_a_hit():
    """An empty arrival list is a cached value, not a miss."""
    cache: CacheStore[int, list] = CacheStore(ttl=60.0, capacity=10)

    cache.put(1, [])

    assert cache.peek(1) == []
    assert 1 in cache


def test_cache_clear():
    """Cache clear should remove every value."""
    cache: CacheStore[int, str] = CacheStore(ttl=10.0, capacity=10)

    cache.put(1, "A")
    cache.put(2, "B")
    cache.clear()

    assert cache.peek(1) is None
    assert len(cache) == 0


@pytest.mark.parametrize(("ttl", "capacity"), [(0, 10), (-1, 10), (60, 0)])
def test_invalid_settings_rejected(ttl: float, capacity: int):
    with pytest.raises(ValueError):
        CacheStore(ttl=ttl, capacity=capacity)


def test_default_distinguishes_cached_none_from_absent():
    """A cached None is found when probing with a sentinel default."""
    missing = object()
    cache: CacheStore[int, None] = CacheStore(ttl=60.0, capacity=10)

    cache.put(1, None)

    assert cache.peek(1, missing) is None
    assert cache.peek(2, missing) is missing
    assert cache.get(2, missing) is missing
    assert 1 in cache
    assert 2 not in cache
