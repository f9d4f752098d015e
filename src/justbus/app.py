"""MCP application instance.

This module exists to avoid circular import issues when running with `python -m`.
All tool modules should import `mcp` from here, not from server.py.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from justbus.data.config import get_config
from justbus.data.lta_client import LTAClient
from justbus.services.arrivals_service import ArrivalCoordinator, build_coordinator


@dataclass
class AppContext:
    """Objects shared by every tool call for the lifetime of the server."""

    coordinator: ArrivalCoordinator


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """Open the LTA client and arrival cache for the server's lifetime."""
    config = get_config()
    async with LTAClient(config) as client:
        coordinator = build_coordinator(config, client)
        try:
            yield AppContext(coordinator=coordinator)
        finally:
            await coordinator.close()


# Initialize the MCP server
mcp = FastMCP(
    "JustBus",
    instructions="Singapore bus arrival timings from LTA DataMall, cached per bus stop",
    lifespan=app_lifespan,
)
