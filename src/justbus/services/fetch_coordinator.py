"""Read-through cache with single-flight upstream fetches.

A fresh cache hit is answered immediately. On a miss, the first caller for a
key starts one upstream fetch (the leader); every caller that arrives while
that fetch is running awaits the same fetch (followers). Successful results
are cached; failures are handed to every waiter and never cached.

The in-flight record is a ``concurrent.futures.Future`` rather than an asyncio
task, so callers running on different event loops (one per worker thread)
can share a single fetch.
"""

import asyncio
import concurrent.futures
import logging
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import asdict, dataclass
from typing import Generic, TypeVar

from justbus.data.cache import CacheStore
from justbus.errors import CoordinationError, UpstreamError

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


@dataclass
class CoordinatorStats:
    """Counters for how ``FetchCoordinator.get`` calls were served."""

    hits: int = 0
    misses: int = 0  # upstream fetches started
    coalesced: int = 0  # callers that joined a running fetch
    failures: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class FetchCoordinator(Generic[K, V]):
    """Serve values from a CacheStore, fetching misses at most once per key.

    The cache lookup and the in-flight lookup run under the store's lock as a
    single critical section, so two callers can never both decide to fetch
    the same key. The lock is never held across an ``await``.

    The fetch runs as a task on the leader's event loop; that loop must keep
    running until the fetch completes.

    Usage:
        coordinator = FetchCoordinator(client.fetch_arrivals, CacheStore(ttl=60))
        services = await coordinator.get(83139)
    """

    def __init__(self, fetch: Callable[[K], Awaitable[V]], cache: CacheStore[K, V]):
        """Initialize the coordinator.

        Args:
            fetch: Upstream fetch for one key. Raises on failure.
            cache: Store for fetched values. Owned by this coordinator from now on.
        """
        self._fetch = fetch
        self._cache = cache
        self._in_flight: dict[K, concurrent.futures.Future[V]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self.stats = CoordinatorStats()

    @property
    def cache(self) -> CacheStore[K, V]:
        return self._cache

    @property
    def in_flight(self) -> int:
        """Number of upstream fetches currently running."""
        with self._cache.lock:
            return len(self._in_flight)

    async def get(self, key: K) -> V:
        """Get the value for a key, from cache or from a single shared fetch.

        Cancelling the caller only abandons its own wait; the shared fetch keeps
        running and still populates the cache.

        Args:
            key: The cache key (a bus stop code).

        Returns:
            The cached or freshly fetched value.

        Raises:
            Exception: Whatever the upstream fetch raised, unchanged.
        """
        with self._cache.lock:
            cached = self._cache.peek(key, _MISSING)
            if cached is not _MISSING:
                self.stats.hits += 1
                logger.debug(f"Cache hit for {key!r}")
                return cached

            future = self._in_flight.get(key)
            if future is None:
                future = concurrent.futures.Future()
                self._in_flight[key] = future
                self.stats.misses += 1
                task = asyncio.get_running_loop().create_task(self._run_fetch(key, future))
                self._tasks.add(task)
                task.add_done_callback(self._forget_task)
            else:
                self.stats.coalesced += 1
                logger.debug(f"Joining in-flight fetch for {key!r}")

        return await asyncio.shield(asyncio.wrap_future(future))

    async def _run_fetch(self, key: K, future: concurrent.futures.Future[V]) -> None:
        """Fetch one key upstream, cache the result and resolve the in-flight record."""
        try:
            value = await self._fetch(key)
        except Exception as e:
            logger.warning(f"Upstream fetch for {key!r} failed: {e}")
            with self._cache.lock:
                self.stats.failures += 1
                self._release(key, future)
                self._resolve(future, error=e)
            return
        except asyncio.CancelledError:
            # cancelled by close() or loop shutdown; waiters get an upstream failure
            with self._cache.lock:
                self._release(key, future)
                self._resolve(future, error=UpstreamError(f"Fetch for {key!r} was cancelled"))
            raise

        with self._cache.lock:
            self._cache.put(key, value)
            self._release(key, future)
            self._resolve(future, value=value)

    def _release(self, key: K, future: concurrent.futures.Future[V]) -> None:
        current = self._in_flight.get(key)
        if current is None:
            # already retired by close()
            return
        if current is not future:
            raise CoordinationError(f"Another fetch is registered for {key!r}")
        del self._in_flight[key]

    @staticmethod
    def _resolve(
        future: concurrent.futures.Future[V],
        value: object = None,
        error: BaseException | None = None,
    ) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    def _forget_task(self, task: asyncio.Task[None]) -> None:
        with self._cache.lock:
            self._tasks.discard(task)

    async def close(self) -> None:
        """Cancel running fetches and fail their waiters."""
        loop = asyncio.get_running_loop()
        with self._cache.lock:
            tasks = list(self._tasks)
        local = []
        for task in tasks:
            if task.get_loop() is loop:
                task.cancel()
                local.append(task)
            else:
                task.get_loop().call_soon_threadsafe(task.cancel)
        await asyncio.gather(*local, return_exceptions=True)

        with self._cache.lock:
            # fetches cancelled before they started never resolved their record
            for future in self._in_flight.values():
                self._resolve(future, error=UpstreamError("Fetch coordinator closed"))
            self._in_flight.clear()
