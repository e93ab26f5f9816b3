from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0

BASE_URL_ENV = "API_BASE_URL"
API_KEY_ENV = "WEATHER_HISTORY_API_KEY"
TIMEOUT_ENV = "CLI_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    """Connection settings for talking to a running history API."""

    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


def _env(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_timeout() -> float:
    raw = _env(TIMEOUT_ENV)
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        seconds = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT
    return seconds if seconds > 0 else DEFAULT_TIMEOUT


def load_config(
    base_url: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    """Merge command-line options over environment values and defaults."""
    return CLIConfig(
        base_url=(base_url or _env(BASE_URL_ENV) or DEFAULT_BASE_URL).rstrip("/"),
        api_key=api_key or _env(API_KEY_ENV),
        timeout=timeout if timeout is not None else _env_timeout(),
    )
