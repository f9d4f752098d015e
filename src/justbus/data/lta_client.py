import logging

import httpx

from justbus.data.config import JustBusConfig
from justbus.errors import UpstreamError
from justbus.models.arrivals import ArrivalBusService, BusArrivalResponse

logger = logging.getLogger(__name__)


class LTAClient:
    """Async HTTP client for fetching bus arrivals from LTA DataMall.

    Usage:
        async with LTAClient(config) as client:
            services = await client.fetch_arrivals(83139)
    """

    def __init__(self, config: JustBusConfig):
        """Initialize the client.

        Args:
            config: Configuration with API key, arrival URL and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "LTAClient":
        """Enter async context - create HTTP client."""
        headers = {"accept": "application/json"}
        if self._config.api_key:
            headers["AccountKey"] = self._config.api_key
        self._client = httpx.AsyncClient(
            headers=headers, timeout=self._config.request_timeout_seconds
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_arrivals(self, stop_code: int) -> list[ArrivalBusService]:
        """Fetch and parse arrivals for a bus stop.

        Args:
            stop_code: Bus stop code (e.g., 83139).

        Returns:
            Arrival predictions for every service calling at the stop.

        Raises:
            RuntimeError: If client not initialized.
            UpstreamError: If the request fails, LTA answers with a non-success
                status, or the payload cannot be parsed.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        logger.info(f"Fetching fresh arrivals from LTA for stop {stop_code}")
        try:
            response = await self._client.get(
                self._config.arrival_url,
                params={"BusStopCode": f"{stop_code:05d}"},
            )
            response.raise_for_status()
            payload = BusArrivalResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"LTA returned {e.response.status_code} for stop {stop_code}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"LTA request for stop {stop_code} failed: {e!r}") from e
        except ValueError as e:  # bad JSON or pydantic ValidationError
            raise UpstreamError(f"Malformed LTA payload for stop {stop_code}: {e}") from e

        return payload.services
