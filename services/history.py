"""Weather history queries: request validation, time window, JSON response."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Dict, Mapping, Optional

from app.schemas import WeatherHistoryResponse
from datastore.weather_table import WeatherTable, build_default_table
from errors import StoreError, ValidationError
from models.records import HistoryQuery
from services.mapper import format_timestamp
from settings import get_settings

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = "6h"
MAX_PERIOD_HOURS = 168
MAX_CITY_LENGTH = 50

_NAMED_PERIODS = {
    "6h": timedelta(hours=6),
    "24h": timedelta(hours=24),
    "1d": timedelta(hours=24),
}
_HOURS_PATTERN = re.compile(r"[1-9][0-9]{0,2}")
_CITY_DISALLOWED = re.compile(r"[^a-zA-Z\s\-]", re.ASCII)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Content-Type": "application/json",
}


def parse_period(token: str) -> timedelta:
    """Resolve ``6h``, ``24h``, ``1d`` or a bare hour count in ``[1, 168]``."""
    named = _NAMED_PERIODS.get(token)
    if named is not None:
        return named
    if _HOURS_PATTERN.fullmatch(token):
        hours = int(token)
        if 1 <= hours <= MAX_PERIOD_HOURS:
            return timedelta(hours=hours)
    raise ValidationError("Invalid period parameter")


def sanitize_city(city: str) -> str:
    """Keep ASCII letters, whitespace and hyphens; cap the length."""
    cleaned = _CITY_DISALLOWED.sub("", city.strip())
    return cleaned[:MAX_CITY_LENGTH]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class HistoryRequest:
    """Transport-neutral view of an incoming HTTP request."""

    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)


@dataclass
class HistoryResponse:
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def _error(status_code: int, message: str) -> HistoryResponse:
    return HistoryResponse(status_code=status_code, body=json.dumps({"error": message}))


class HistoryService:
    """Serves the read-only history endpoint on top of :class:`WeatherTable`."""

    def __init__(
        self,
        table: WeatherTable,
        default_city: str,
        require_api_key: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.table = table
        self.default_city = default_city
        self.require_api_key = require_api_key
        self.clock = clock

    def build_query(self, period: Optional[str], city: Optional[str]) -> HistoryQuery:
        """Validate raw parameters and derive the ``[start, end]`` window."""
        token = period or DEFAULT_PERIOD
        duration = parse_period(token)
        resolved_city = sanitize_city(city or self.default_city)
        end = self.clock()
        return HistoryQuery(
            period=token,
            duration=duration,
            city=resolved_city,
            start=end - duration,
            end=end,
        )

    def handle(self, request: HistoryRequest) -> HistoryResponse:
        method = request.method.upper()
        if method == "OPTIONS":
            return HistoryResponse(status_code=200, body="")
        if method != "GET":
            return _error(405, "Method not allowed")

        if self.require_api_key and not _has_api_key(request.headers):
            logger.warning("Missing API key in request", extra={"status_code": 401})
            return _error(401, "API key required")

        try:
            query = self.build_query(request.query.get("period"), request.query.get("city"))
        except ValidationError as exc:
            return _error(400, str(exc))

        try:
            records = self.table.query_by_city_and_window(query.city, query.start, query.end)
        except StoreError:
            logger.error(
                "Error getting weather history",
                exc_info=True,
                extra={"city": query.city, "period": query.period, "status_code": 500},
            )
            return _error(500, "Failed to retrieve weather history")

        logger.info(
            "Weather history retrieved",
            extra={"city": query.city, "period": query.period, "count": len(records)},
        )
        payload = WeatherHistoryResponse(
            status_code=200,
            message="Weather history retrieved successfully",
            data=records,
            count=len(records),
            period=query.period,
            start_time=format_timestamp(query.start),
            end_time=format_timestamp(query.end),
        )
        return HistoryResponse(status_code=200, body=payload.model_dump_json(by_alias=True))


def _has_api_key(headers: Mapping[str, str]) -> bool:
    return any(name.lower() == "x-api-key" and value for name, value in headers.items())


@lru_cache
def build_default_history_service() -> HistoryService:
    settings = get_settings()
    return HistoryService(
        table=build_default_table(),
        default_city=settings.city_name,
        require_api_key=settings.require_api_key,
    )
