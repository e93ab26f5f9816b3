from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
import typer
from typer.testing import CliRunner

from app.schemas import CollectionData, CollectionStage, CollectionSummary
from cli.app import app
from errors import ConfigurationError


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.history_calls: List[tuple[Optional[str], Optional[str]]] = []
        self.history_payload: Dict[str, Any] = {
            "statusCode": 200,
            "message": "Weather history retrieved successfully",
            "data": [
                {
                    "id": "Tokyo-1717232400",
                    "timestamp": "2024-06-01T09:00:00Z",
                    "cityName": "Tokyo",
                    "temperature": 24.0,
                    "description": "few clouds",
                    "humidity": 58,
                    "pressure": 1012,
                    "windSpeed": 4.1,
                    "country": "JP",
                }
            ],
            "count": 1,
            "period": "6h",
            "startTime": "2024-06-01T06:00:00Z",
            "endTime": "2024-06-01T12:00:00Z",
        }
        self.closed = False

    def get_history(self, period: Optional[str] = None, city: Optional[str] = None) -> Dict[str, Any]:
        self.history_calls.append((period, city))
        return self.history_payload

    def get_record(self, record_id: str, timestamp: str) -> Dict[str, Any]:
        record = dict(self.history_payload["data"][0])
        record.update(id=record_id, timestamp=timestamp)
        return record

    def close(self) -> None:
        self.closed = True


class StubCollector:
    def __init__(self, summary: CollectionSummary) -> None:
        self.summary = summary

    def collect(self) -> CollectionSummary:
        return self.summary


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    monkeypatch.setattr("cli.app.configure_logging", lambda: None)
    return client


def _install_collector(monkeypatch, build) -> None:
    monkeypatch.setattr("cli.app.build_default_collector", build)


def test_history_renders_records(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        ["--api-key", "key-123", "history", "--period", "6h", "--city", "Tokyo"],
    )

    assert result.exit_code == 0
    assert "Weather History" in result.stdout
    assert "Tokyo: 24.0C, few clouds" in result.stdout
    assert stub.history_calls == [("6h", "Tokyo")]
    assert stub.config.api_key == "key-123"
    assert stub.closed is True


def test_history_reads_options_from_environment(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://history.internal:9000/")
    monkeypatch.setenv("WEATHER_HISTORY_API_KEY", "env-key")
    stub.history_payload = {**stub.history_payload, "data": [], "count": 0}

    result = runner.invoke(app, ["history"])

    assert result.exit_code == 0
    assert "No records in this window." in result.stdout
    assert stub.history_calls == [(None, None)]
    assert stub.config.base_url == "http://history.internal:9000"
    assert stub.config.api_key == "env-key"


def test_history_propagates_client_exit(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    def failing(period=None, city=None):
        raise typer.Exit(code=1)

    monkeypatch.setattr(stub, "get_history", failing)

    result = runner.invoke(app, ["history", "--period", "999"])

    assert result.exit_code == 1


def test_collect_success(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    summary = CollectionSummary(
        status_code=200,
        message="Weather data processed successfully",
        stage=CollectionStage.done,
        data=CollectionData(
            city="Tokyo",
            temperature=25.5,
            description="clear sky",
            timestamp="2024-06-01T12:00:00Z",
            record_id="Tokyo-1717243200",
        ),
    )
    _install_collector(monkeypatch, lambda: StubCollector(summary))

    result = runner.invoke(app, ["collect"])

    assert result.exit_code == 0
    assert "Collection Result" in result.stdout
    assert "record_id: Tokyo-1717243200" in result.stdout


def test_collect_failure_exits_non_zero(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    summary = CollectionSummary(
        status_code=500,
        message="Failed to archive weather data: bucket unavailable",
        stage=CollectionStage.failed,
        failed_stage=CollectionStage.writing_blob,
    )
    _install_collector(monkeypatch, lambda: StubCollector(summary))

    result = runner.invoke(app, ["collect"])

    assert result.exit_code == 1
    assert "failed_stage: writing_blob" in result.stdout


def test_collect_without_configuration(runner: CliRunner, stub: StubClient, monkeypatch) -> None:
    def build():
        raise ConfigurationError("Missing required environment variables: WEATHER_API_KEY")

    _install_collector(monkeypatch, build)

    result = runner.invoke(app, ["collect"])

    assert result.exit_code == 1


def test_record_renders_single_record(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app, ["record", "Tokyo-1717232400", "--timestamp", "2024-06-01T09:00:00Z"]
    )

    assert result.exit_code == 0
    assert "Weather Record Tokyo-1717232400" in result.stdout
    assert "wind_speed: 4.1" in result.stdout
