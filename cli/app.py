from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_collection, render_history, render_record
from errors import ConfigurationError
from logging_config import configure_logging
from services.collector import build_default_collector


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for collecting and querying weather history.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="History API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        help="Value sent as X-API-Key (defaults to WEATHER_HISTORY_API_KEY env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, api_key=api_key, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("history")
def history_command(
    ctx: typer.Context,
    period: Optional[str] = typer.Option(
        None,
        "--period",
        "-p",
        help="6h, 24h, 1d or a number of hours between 1 and 168 (server default 6h).",
    ),
    city: Optional[str] = typer.Option(
        None,
        "--city",
        "-c",
        help="City name (server default is the configured city).",
    ),
) -> None:
    """Show stored weather records for a recent time window."""
    state = _get_state(ctx)
    payload = state.client.get_history(period=period, city=city)
    render_history(payload)


@app.command("record")
def record_command(
    ctx: typer.Context,
    record_id: str = typer.Argument(..., help="Record id, for example Tokyo-1717243200."),
    timestamp: str = typer.Option(
        ...,
        "--timestamp",
        "-t",
        help="Collection timestamp of the record (YYYY-MM-DDTHH:MM:SSZ).",
    ),
) -> None:
    """Show a single stored weather record."""
    state = _get_state(ctx)
    render_record(state.client.get_record(record_id, timestamp))


@app.command("collect")
def collect_command() -> None:
    """Run one collection event in-process using the configured stores."""
    configure_logging()
    try:
        collector = build_default_collector()
    except ConfigurationError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    summary = collector.collect()
    render_collection(summary.model_dump(mode="json", by_alias=True))
    if summary.status_code != 200:
        raise typer.Exit(code=1)
