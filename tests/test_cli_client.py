from __future__ import annotations

import httpx
import pytest
import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config


def _client(handler, api_key: str | None = "key-123") -> ApiClient:
    config = CLIConfig(base_url="http://history.test", api_key=api_key, timeout=5.0)
    return ApiClient(config, transport=httpx.MockTransport(handler))


def test_get_history_sends_key_and_non_empty_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"count": 0, "data": []})

    client = _client(handler)
    payload = client.get_history(period="24h", city=None)
    client.close()

    assert payload == {"count": 0, "data": []}
    assert seen[0].url.path == "/weather/history"
    assert dict(seen[0].url.params) == {"period": "24h"}
    assert seen[0].headers["X-API-Key"] == "key-123"


def test_missing_api_key_sends_no_header() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    _client(handler, api_key=None).get_history()

    assert "X-API-Key" not in seen[0].headers


def test_error_body_is_reported_and_exits(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Invalid period parameter"})

    with pytest.raises(typer.Exit) as excinfo:
        _client(handler).get_history(period="0")

    assert excinfo.value.exit_code == 1
    assert "Invalid period parameter" in capsys.readouterr().err


def test_connection_failure_exits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(typer.Exit):
        _client(handler).get_record("Tokyo-1", "2024-06-01T09:00:00Z")


def test_load_config_prefers_options_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.test/")
    monkeypatch.setenv("WEATHER_HISTORY_API_KEY", "  ")
    monkeypatch.setenv("CLI_TIMEOUT", "-3")

    from_env = load_config()
    explicit = load_config(base_url="http://flag.test/", api_key="flag-key", timeout=2.0)

    assert from_env.base_url == "http://env.test"
    assert from_env.api_key is None
    assert from_env.timeout == 30.0
    assert explicit == CLIConfig(base_url="http://flag.test", api_key="flag-key", timeout=2.0)
