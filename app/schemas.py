"""Pydantic schemas for persisted records and HTTP payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.provider import WeatherReading


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys, populated by either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeatherRecord(CamelModel):
    """Flattened observation stored in the table, keyed by ``(id, timestamp)``."""

    id: str
    timestamp: str = Field(..., description="ISO-8601 UTC collection time.")
    city_name: str
    temperature: float = Field(..., description="Degrees Celsius.")
    description: str = ""
    humidity: int
    pressure: int
    wind_speed: float
    country: str = ""
    created_at: datetime
    ttl: int = Field(..., description="Unix seconds after which the store may purge the item.")


class ArchivalEnvelope(WeatherRecord):
    """Record plus the untouched provider payload, written to blob storage."""

    raw_response: WeatherReading


class CollectionStage(str, Enum):
    """Steps of a single collection event."""

    idle = "idle"
    fetching = "fetching"
    mapping = "mapping"
    writing_table = "writing_table"
    writing_blob = "writing_blob"
    done = "done"
    failed = "failed"


class CollectionData(CamelModel):
    city: str
    temperature: float
    description: str
    timestamp: str
    record_id: str


class CollectionSummary(CamelModel):
    """Outcome of a collection event."""

    status_code: int
    message: str
    stage: CollectionStage
    failed_stage: Optional[CollectionStage] = None
    data: Optional[CollectionData] = None


class WeatherHistoryResponse(CamelModel):
    status_code: int
    message: str
    data: List[WeatherRecord] = Field(default_factory=list)
    count: int
    period: str
    start_time: str
    end_time: str


class ArchiveObject(CamelModel):
    key: str
    size: int
    last_modified: Optional[datetime] = None


class ErrorResponse(BaseModel):
    error: str
