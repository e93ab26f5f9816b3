"""Exception hierarchy shared by the collector and the history endpoint."""

from __future__ import annotations


class WeatherServiceError(Exception):
    """Base class for every error raised by this service."""


class ConfigurationError(WeatherServiceError):
    """Required configuration is missing or malformed."""


class TransportError(WeatherServiceError):
    """The weather provider could not be reached (network, DNS, timeout)."""


class UpstreamStatusError(WeatherServiceError):
    """The weather provider answered with a non-200 status."""

    def __init__(self, code: int, body: str) -> None:
        super().__init__(f"weather API returned status {code}: {body}")
        self.code = code
        self.body = body


class DecodeError(WeatherServiceError):
    """A payload did not parse into the expected shape."""


class StoreError(WeatherServiceError):
    """A persistence backend call failed."""


class StoreWriteError(StoreError):
    pass


class StoreReadError(StoreError):
    pass


class NotFoundError(WeatherServiceError):
    """A keyed item does not exist."""


class ValidationError(WeatherServiceError):
    """Request input is malformed."""
