class DataThistleError(Exception):
    """Base class for everything the DataThistle tooling raises."""


class ConfigError(DataThistleError):
    """Startup configuration is unusable (e.g. no API key)."""


class RequestFailedError(DataThistleError):
    """A request did not produce a usable page of events."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


class RateLimitedError(RequestFailedError):
    """HTTP 429."""


class UnauthorizedError(RequestFailedError):
    """HTTP 401: the bearer token was rejected."""
