"""Size-bounded TTL cache for bus arrival timings."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")
D = TypeVar("D")

_MISSING = object()


@dataclass(slots=True)
class CacheEntry(Generic[V]):
    value: V
    expires_at: float


class CacheStore(Generic[K, V]):
    """Keyed cache with combined LRU and TTL eviction.

    Every entry shares one TTL. An entry is valid while ``clock() < expires_at``;
    expired entries are treated as absent and dropped whenever they are found.
    When an insert pushes the store over capacity, expired entries go first and
    then the least recently used ones.

    All access is guarded by a re-entrant lock, exposed as ``lock`` so that a
    caller can make a lookup and its own bookkeeping one atomic step.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        capacity: int = 2000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl: Time-to-live in seconds for cached values.
            capacity: Maximum number of entries held at once.
            clock: Monotonic time source, in seconds.

        Raises:
            ValueError: If ttl is not positive or capacity is below 1.
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._ttl = ttl
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[K, CacheEntry[V]] = OrderedDict()
        self._lock = threading.RLock()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def lock(self) -> threading.RLock:
        """Get the lock guarding the entries, for coordinating fetches."""
        return self._lock

    def peek(self, key: K, default: D | None = None) -> V | D | None:
        """Look up a value without touching its recency.

        Args:
            key: The cache key.
            default: Returned when the key is absent or expired. Pass a sentinel
                when None is itself a cached value.

        Returns:
            The cached value if present and not expired, default otherwise.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry.expires_at:
                return entry.value
            return default

    def get(self, key: K, default: D | None = None) -> V | D | None:
        """Look up a value and mark it as most recently used.

        An expired entry found here is removed. The coordinator reads with
        peek only; this is the access path for direct users of the store.

        Args:
            key: The cache key.
            default: Returned when the key is absent or expired.

        Returns:
            The cached value if present and not expired, default otherwise.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return default
            self._entries.move_to_end(key)
            return entry.value

    def put(self, key: K, value: V) -> None:
        """Insert or replace a value with a fresh expiry.

        Args:
            key: The cache key.
            value: The value to cache.
        """
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + self._ttl)
            self._entries.move_to_end(key)
            if len(self._entries) > self._capacity:
                self.purge_expired()
            while len(self._entries) > self._capacity:
                # evict LRU
                self._entries.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return self.peek(key, _MISSING) is not _MISSING  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
