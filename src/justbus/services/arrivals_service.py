"""Wiring between the LTA client and the arrival cache."""

from justbus.data.cache import CacheStore
from justbus.data.config import JustBusConfig
from justbus.data.lta_client import LTAClient
from justbus.models.arrivals import ArrivalBusService
from justbus.services.fetch_coordinator import FetchCoordinator

ArrivalCoordinator = FetchCoordinator[int, list[ArrivalBusService]]


def build_coordinator(config: JustBusConfig, client: LTAClient) -> ArrivalCoordinator:
    """Create an arrival coordinator backed by a fresh cache.

    Args:
        config: Settings providing the cache TTL and capacity.
        client: Open LTA client used for every upstream fetch.

    Returns:
        FetchCoordinator keyed by bus stop code.
    """
    cache: CacheStore[int, list[ArrivalBusService]] = CacheStore(
        ttl=config.cache_ttl_seconds,
        capacity=config.cache_capacity,
    )
    return FetchCoordinator(client.fetch_arrivals, cache)
