"""Exceptions raised by the arrival cache and its upstream client."""


class JustBusError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(JustBusError):
    """The LTA fetch failed: network failure, non-success status or malformed payload."""

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message, status_code=500)
        self.upstream_status = upstream_status


class CoordinationError(JustBusError):
    """The in-flight table lost track of a running fetch."""
