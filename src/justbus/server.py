import argparse
import logging
from datetime import UTC, datetime

import uvicorn
from pydantic import BaseModel

from justbus.app import mcp
from justbus.data.config import JustBusConfig, get_config
from justbus.tools import timings_tools  # noqa: F401  (registers MCP tools)
from justbus.web.app import create_app


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the JustBus MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from justbus import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def run_http(config: JustBusConfig, host: str, port: int) -> None:
    """Serve the timings API over HTTP."""
    uvicorn.run(create_app(config), host=host, port=port)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="justbus",
        description="Cached LTA bus arrival timings",
    )
    subparsers = parser.add_subparsers(dest="command")

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve /api/v1/timings/{stop_code} over HTTP",
    )
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Bind address (default: 127.0.0.1 or JUSTBUS_HOST env var)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (default: 8080 or JUSTBUS_PORT env var)",
    )
    serve_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.command == "serve":
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        config = get_config()
        host = args.host or config.host
        port = args.port or config.port
        logging.getLogger(__name__).info(f"Starting server @ {host}:{port}")
        run_http(config, host, port)
    else:
        # Default: run MCP server
        mcp.run()


if __name__ == "__main__":
    main()
