from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_history(payload: Dict[str, Any]) -> None:
    echo_heading("Weather History")
    echo_key_values(
        [
            ("period", payload.get("period")),
            ("start_time", payload.get("startTime")),
            ("end_time", payload.get("endTime")),
            ("count", payload.get("count")),
        ]
    )

    records = payload.get("data") or []
    typer.echo()
    echo_heading("Records")
    if not records:
        typer.echo("No records in this window.")
        return
    for record in records:
        typer.echo(
            f"  - {record.get('timestamp')} {record.get('cityName')}: "
            f"{record.get('temperature')}C, {record.get('description') or 'n/a'}, "
            f"humidity {record.get('humidity')}%, wind {record.get('windSpeed')} m/s"
        )


def render_collection(payload: Dict[str, Any]) -> None:
    echo_heading("Collection Result")
    echo_key_values(
        [
            ("status_code", payload.get("statusCode")),
            ("message", payload.get("message")),
            ("stage", payload.get("stage")),
        ]
    )
    failed_stage = payload.get("failedStage")
    if failed_stage:
        typer.echo(f"failed_stage: {failed_stage}")

    data = payload.get("data") or {}
    if data:
        typer.echo()
        echo_heading("Record")
        echo_key_values(
            [
                ("record_id", data.get("recordId")),
                ("city", data.get("city")),
                ("temperature", data.get("temperature")),
                ("description", data.get("description")),
                ("timestamp", data.get("timestamp")),
            ]
        )


def render_record(payload: Dict[str, Any]) -> None:
    echo_heading(f"Weather Record {payload.get('id')}")
    echo_key_values(
        [
            ("timestamp", payload.get("timestamp")),
            ("city", payload.get("cityName")),
            ("country", payload.get("country")),
            ("temperature", payload.get("temperature")),
            ("description", payload.get("description")),
            ("humidity", payload.get("humidity")),
            ("pressure", payload.get("pressure")),
            ("wind_speed", payload.get("windSpeed")),
        ]
    )
