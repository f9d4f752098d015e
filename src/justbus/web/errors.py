"""Centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from justbus.errors import JustBusError, UpstreamError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        # logged at WARNING by the coordinator; no upstream detail in the body
        logger.info(f"Upstream failure serving {request.url.path}")
        return JSONResponse({"error": "Internal server error"}, status_code=exc.status_code)

    @app.exception_handler(JustBusError)
    async def handle_justbus_error(request: Request, exc: JustBusError):
        logger.error(f"Error serving {request.url.path}: {exc}")
        return JSONResponse({"error": "Internal server error"}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {exc}")
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
