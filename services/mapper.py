"""Mapping from provider readings to persisted shapes."""

from __future__ import annotations

from datetime import datetime, timezone

import pydantic

from app.schemas import ArchivalEnvelope, WeatherRecord
from errors import DecodeError
from models.provider import WeatherReading

RECORD_TTL_SECONDS = 30 * 24 * 3600
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(moment: datetime) -> str:
    """Fixed-width UTC ISO-8601 form, so string order equals time order."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class RecordMapper:
    """Pure transformation component that can be unit tested in isolation.

    A reading whose values do not fit the record schema raises ``DecodeError``.
    """

    def to_record(self, reading: WeatherReading, now: datetime) -> WeatherRecord:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now = now.astimezone(timezone.utc).replace(microsecond=0)
        unix_seconds = int(now.timestamp())

        description = reading.weather[0].description if reading.weather else ""

        try:
            return WeatherRecord(
                id=f"{reading.name}-{unix_seconds}",
                timestamp=format_timestamp(now),
                city_name=reading.name,
                temperature=reading.main.temp,
                description=description,
                humidity=reading.main.humidity,
                pressure=reading.main.pressure,
                wind_speed=reading.wind.speed,
                country=reading.sys.country,
                created_at=now,
                ttl=unix_seconds + RECORD_TTL_SECONDS,
            )
        except pydantic.ValidationError as exc:
            raise DecodeError(f"reading does not map to a weather record: {exc}") from exc

    def to_envelope(self, reading: WeatherReading, record: WeatherRecord) -> ArchivalEnvelope:
        try:
            return ArchivalEnvelope(**record.model_dump(), raw_response=reading)
        except pydantic.ValidationError as exc:
            raise DecodeError(f"reading does not map to an archival envelope: {exc}") from exc
