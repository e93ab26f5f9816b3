"""Unit tests for the weather provider client."""

from __future__ import annotations

import httpx
import pytest

from errors import DecodeError, TransportError, UpstreamStatusError
from services.weather_client import WeatherClient

API_URL = "https://weather.example.test/data/2.5/weather"

SAMPLE_PAYLOAD = {
    "coord": {"lon": 139.6917, "lat": 35.6895},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {
        "temp": 25.5,
        "feels_like": 25.9,
        "temp_min": 24.1,
        "temp_max": 26.8,
        "pressure": 1013,
        "humidity": 60,
    },
    "wind": {"speed": 3.5, "deg": 180},
    "clouds": {"all": 0},
    "dt": 1704103200,
    "sys": {"country": "JP", "sunrise": 1704059100, "sunset": 1704095160},
    "name": "Tokyo",
}


def _client(handler) -> WeatherClient:
    return WeatherClient(API_URL, transport=httpx.MockTransport(handler))


def test_fetch_sends_query_parameters_and_parses_reading() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SAMPLE_PAYLOAD)

    client = _client(handler)
    reading = client.fetch("Tokyo", "secret-key")
    client.close()

    assert len(seen) == 1
    params = seen[0].url.params
    assert params["q"] == "Tokyo"
    assert params["appid"] == "secret-key"
    assert params["units"] == "metric"
    assert seen[0].method == "GET"

    assert reading.name == "Tokyo"
    assert reading.main.temp == 25.5
    assert reading.main.humidity == 60
    assert reading.weather[0].description == "clear sky"
    assert reading.sys.country == "JP"
    assert reading.coord.lat == 35.6895


def test_non_200_status_raises_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text='{"cod":401, "message": "Invalid API key"}')

    client = _client(handler)
    with pytest.raises(UpstreamStatusError) as excinfo:
        client.fetch("Tokyo", "bad-key")

    assert excinfo.value.code == 401
    assert "Invalid API key" in excinfo.value.body


def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(TransportError):
        client.fetch("Tokyo", "secret-key")


def test_timeout_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(handler)
    with pytest.raises(TransportError):
        client.fetch("Tokyo", "secret-key")


def test_invalid_json_raises_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    client = _client(handler)
    with pytest.raises(DecodeError):
        client.fetch("Tokyo", "secret-key")


def test_unexpected_shape_raises_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "Tokyo", "main": {"temp": "warm"}})

    client = _client(handler)
    with pytest.raises(DecodeError):
        client.fetch("Tokyo", "secret-key")
