from mcp.server.fastmcp import Context

from justbus.app import AppContext, mcp
from justbus.models.arrivals import MAX_STOP_CODE, TimingResult


@mcp.tool()
async def get_bus_arrivals(stop_code: int, ctx: Context) -> TimingResult:
    """Get upcoming bus arrivals at a Singapore bus stop.

    Results are cached per stop for a short time, so repeated calls within
    the cache window return the same predictions without contacting LTA.

    Args:
        stop_code: The 5-digit bus stop code (e.g., 83139).

    Returns:
        TimingResult with the stop code and each service's next three buses.
    """
    if not 0 <= stop_code <= MAX_STOP_CODE:
        raise ValueError(f"Bus stop code must be between 0 and {MAX_STOP_CODE}, got {stop_code}")

    app_context: AppContext = ctx.request_context.lifespan_context
    services = await app_context.coordinator.get(stop_code)
    return TimingResult(bus_stop_code=stop_code, data=services)
