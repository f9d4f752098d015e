from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JustBusConfig(BaseSettings):
    """Configuration for the LTA client, the arrival cache and the HTTP server.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    api_key: str | None = Field(default=None, alias="API_KEY")
    arrival_url: str = "https://datamall2.mytransport.sg/ltaodataservice/v3/BusArrival"
    request_timeout_seconds: float = Field(default=10.0, alias="LTA_TIMEOUT_SECONDS")

    # arrival cache
    cache_ttl_seconds: float = Field(default=60.0, gt=0, alias="JUSTBUS_CACHE_TTL")
    cache_capacity: int = Field(default=2000, ge=1, alias="JUSTBUS_CACHE_CAPACITY")

    # HTTP server
    host: str = Field(default="127.0.0.1", alias="JUSTBUS_HOST")
    port: int = Field(default=8080, alias="JUSTBUS_PORT")


@lru_cache
def get_config() -> JustBusConfig:
    """Get the process configuration (cached singleton).

    Only the entry points call this; components receive the config explicitly.

    Returns:
        JustBusConfig with values from .env file or environment variables.
    """
    return JustBusConfig()
