from __future__ import annotations

from typing import Any, Dict, NoReturn, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Thin wrapper over the history API; request failures exit the CLI."""

    def __init__(self, config: CLIConfig, transport: httpx.BaseTransport | None = None) -> None:
        self._config = config
        headers = {"X-API-Key": config.api_key} if config.api_key else {}
        self._client = httpx.Client(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def get_history(self, period: Optional[str] = None, city: Optional[str] = None) -> Dict[str, Any]:
        params = {"period": period, "city": city}
        return self._get_json("/weather/history", {k: v for k, v in params.items() if v})

    def get_record(self, record_id: str, timestamp: str) -> Dict[str, Any]:
        return self._get_json(f"/weather/records/{record_id}", {"timestamp": timestamp})

    def _get_json(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            _fail(f"Could not reach {self._config.base_url}: {exc}")
        if response.status_code != 200:
            _fail(f"Request failed with status {response.status_code}: {_error_detail(response)}")
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or "no detail provided."
    if isinstance(data, dict):
        return str(data.get("error") or data.get("detail") or "no detail provided.")
    return str(data)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)
