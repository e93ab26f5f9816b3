"""HTTP client for the current-weather provider."""

from __future__ import annotations

import logging

import httpx
import pydantic

from errors import DecodeError, TransportError, UpstreamStatusError
from models.provider import WeatherReading

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class WeatherClient:
    """Fetches a single observation per call. No retries are attempted."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch(self, city: str, api_key: str) -> WeatherReading:
        params = {"q": city, "appid": api_key, "units": "metric"}
        try:
            response = self._client.get(self.base_url, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"failed to make weather API request: {exc}") from exc

        if response.status_code != 200:
            raise UpstreamStatusError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise DecodeError(f"failed to parse weather API response: {exc}") from exc

        try:
            reading = WeatherReading.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise DecodeError(f"unexpected weather API response shape: {exc}") from exc

        logger.debug("Fetched weather reading", extra={"city": reading.name})
        return reading
