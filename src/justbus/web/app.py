"""FastAPI application serving cached bus arrival timings."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Path, Request

from justbus import __version__
from justbus.data.config import JustBusConfig
from justbus.data.lta_client import LTAClient
from justbus.models.arrivals import MAX_STOP_CODE
from justbus.services.arrivals_service import ArrivalCoordinator, build_coordinator
from justbus.web.errors import register_error_handlers

logger = logging.getLogger(__name__)


def get_coordinator(request: Request) -> ArrivalCoordinator:
    return request.app.state.coordinator


def create_app(
    config: JustBusConfig | None = None,
    coordinator: ArrivalCoordinator | None = None,
) -> FastAPI:
    """Create the HTTP app.

    Args:
        config: Settings used to build the LTA client and cache. Ignored when
            a coordinator is supplied.
        coordinator: Pre-built coordinator to serve from (tests inject one).

    Returns:
        FastAPI app exposing the timings and health routes.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if coordinator is not None:
            yield
            return

        settings = config or JustBusConfig()
        if settings.api_key is None:
            logger.warning("API_KEY is not set; LTA will reject arrival requests")
        async with LTAClient(settings) as client:
            app.state.coordinator = build_coordinator(settings, client)
            logger.info(
                f"Arrival cache ready (ttl={settings.cache_ttl_seconds}s, "
                f"capacity={settings.cache_capacity})"
            )
            try:
                yield
            finally:
                await app.state.coordinator.close()

    app = FastAPI(title="JustBus", version=__version__, lifespan=lifespan)
    register_error_handlers(app)
    if coordinator is not None:
        app.state.coordinator = coordinator

    @app.get("/api/v1/timings/{stop_code}")
    async def get_timings(
        stop_code: Annotated[int, Path(ge=0, le=MAX_STOP_CODE)],
        coordinator: Annotated[ArrivalCoordinator, Depends(get_coordinator)],
    ) -> list[dict]:
        """Return arrival predictions for a bus stop as a JSON array."""
        services = await coordinator.get(stop_code)
        return [service.model_dump(mode="json", by_alias=True) for service in services]

    @app.get("/health")
    async def health(
        coordinator: Annotated[ArrivalCoordinator, Depends(get_coordinator)],
    ) -> dict:
        """Lightweight health check, no upstream calls."""
        return {
            "status": "ok",
            "version": __version__,
            "cache_entries": len(coordinator.cache),
            "in_flight": coordinator.in_flight,
            "stats": coordinator.stats.as_dict(),
        }

    return app
