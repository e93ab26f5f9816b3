from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from errors import ConfigurationError


_API_KEY_ENV = "WEATHER_API_KEY"
_API_URL_ENV = "WEATHER_API_URL"
_API_TIMEOUT_ENV = "WEATHER_API_TIMEOUT"
_CITY_NAME_ENV = "CITY_NAME"
_BUCKET_NAME_ENV = "S3_BUCKET"
_TABLE_NAME_ENV = "DYNAMODB_TABLE"
_REGION_ENV = "AWS_REGION"
_BACKEND_ENV = "WEATHER_STORAGE_BACKEND"
_LOCAL_BUCKET_ROOT_ENV = "LOCAL_S3_ROOT_PATH"
_LOCAL_TABLE_PATH_ENV = "LOCAL_DYNAMODB_PATH"
_REQUIRE_API_KEY_ENV = "HISTORY_REQUIRE_API_KEY"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_API_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_CITY = "Tokyo"
DEFAULT_REGION = "ap-northeast-1"

STORAGE_BACKENDS = ("aws", "local")


@dataclass(frozen=True)
class Settings:
    weather_api_key: str
    weather_api_url: str
    city_name: str
    bucket_name: str
    table_name: str
    region: str
    storage_backend: str
    local_bucket_root: Optional[str]
    local_table_path: Optional[str]
    require_api_key: bool
    request_timeout: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in {"1", "true", "yes", "on"}:
        return True
    if candidate in {"0", "false", "no", "off"}:
        return False
    return default


def _read_timeout(default: float) -> float:
    value = os.getenv(_API_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_backend(default: str) -> str:
    candidate = _read_str_env(_BACKEND_ENV, default).lower()
    if candidate not in STORAGE_BACKENDS:
        raise ConfigurationError(
            f"{_BACKEND_ENV} must be one of {', '.join(STORAGE_BACKENDS)}; got {candidate!r}."
        )
    return candidate


def read_log_level(default: str = "INFO") -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    """Load configuration from the environment, failing on missing required values."""
    required = {
        _API_KEY_ENV: _read_str_env(_API_KEY_ENV, ""),
        _BUCKET_NAME_ENV: _read_str_env(_BUCKET_NAME_ENV, ""),
        _TABLE_NAME_ENV: _read_str_env(_TABLE_NAME_ENV, ""),
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    return Settings(
        weather_api_key=required[_API_KEY_ENV],
        weather_api_url=_read_str_env(_API_URL_ENV, DEFAULT_API_URL),
        city_name=_read_str_env(_CITY_NAME_ENV, DEFAULT_CITY),
        bucket_name=required[_BUCKET_NAME_ENV],
        table_name=required[_TABLE_NAME_ENV],
        region=_read_str_env(_REGION_ENV, DEFAULT_REGION),
        storage_backend=_read_backend("aws"),
        local_bucket_root=_read_optional_env(_LOCAL_BUCKET_ROOT_ENV, "./tmp/mock_s3"),
        local_table_path=_read_optional_env(_LOCAL_TABLE_PATH_ENV, "./tmp/mock_db.json"),
        require_api_key=_read_bool_env(_REQUIRE_API_KEY_ENV, True),
        request_timeout=_read_timeout(30.0),
        log_level=read_log_level("INFO"),
    )
