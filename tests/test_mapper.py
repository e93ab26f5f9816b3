"""Unit tests for the record mapping logic."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from errors import DecodeError
from models.provider import Condition, MainReadings, SystemInfo, WeatherReading, Wind
from services.mapper import RecordMapper, format_timestamp

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_UNIX = int(NOW.timestamp())


def _reading(conditions: list[Condition] | None = None) -> WeatherReading:
    return WeatherReading(
        name="Tokyo",
        main=MainReadings(temp=25.5, humidity=60, pressure=1013),
        weather=conditions if conditions is not None else [Condition(description="Clear sky")],
        wind=Wind(speed=3.5),
        sys=SystemInfo(country="JP"),
    )


def test_to_record_maps_fields() -> None:
    record = RecordMapper().to_record(_reading(), NOW)

    assert record.id == f"Tokyo-{NOW_UNIX}"
    assert record.timestamp == "2024-01-01T12:00:00Z"
    assert record.city_name == "Tokyo"
    assert record.temperature == 25.5
    assert record.description == "Clear sky"
    assert record.humidity == 60
    assert record.pressure == 1013
    assert record.wind_speed == 3.5
    assert record.country == "JP"
    assert record.created_at == NOW
    assert record.ttl == NOW_UNIX + 2592000


def test_to_record_without_conditions_leaves_description_empty() -> None:
    record = RecordMapper().to_record(_reading(conditions=[]), NOW)

    assert record.description == ""


def test_to_record_uses_first_condition() -> None:
    conditions = [Condition(description="light rain"), Condition(description="mist")]

    record = RecordMapper().to_record(_reading(conditions=conditions), NOW)

    assert record.description == "light rain"


def test_to_record_is_deterministic_and_drops_subseconds() -> None:
    mapper = RecordMapper()
    now = NOW.replace(microsecond=654321)

    first = mapper.to_record(_reading(), now)
    second = mapper.to_record(_reading(), now)

    assert first == second
    assert first.timestamp == "2024-01-01T12:00:00Z"


def test_to_envelope_embeds_record_and_raw_reading() -> None:
    mapper = RecordMapper()
    reading = _reading()
    record = mapper.to_record(reading, NOW)

    envelope = mapper.to_envelope(reading, record)

    assert envelope.id == record.id
    assert envelope.temperature == record.temperature
    assert envelope.raw_response == reading
    dumped = envelope.model_dump(mode="json", by_alias=True)
    assert dumped["cityName"] == "Tokyo"
    assert dumped["rawResponse"]["main"]["temp"] == 25.5


def test_format_timestamp_normalizes_to_utc() -> None:
    naive = datetime(2024, 3, 5, 7, 8, 9)

    assert format_timestamp(naive) == "2024-03-05T07:08:09Z"


def test_to_record_rejects_unmappable_reading() -> None:
    reading = _reading().model_copy(update={"name": None})

    with pytest.raises(DecodeError):
        RecordMapper().to_record(reading, NOW)
