"""Scheduled collection: fetch, map, then write to the table and the archive."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable

from app.schemas import CollectionData, CollectionStage, CollectionSummary
from datastore.weather_table import WeatherTable, build_default_table
from errors import WeatherServiceError
from services.mapper import RecordMapper
from services.weather_client import WeatherClient
from settings import get_settings
from storage.weather_archive import WeatherArchive, build_default_archive

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    CollectionStage.fetching: "Failed to fetch weather data",
    CollectionStage.mapping: "Failed to map weather data",
    CollectionStage.writing_table: "Failed to store weather record",
    CollectionStage.writing_blob: "Failed to archive weather data",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectorService:
    """Runs one collection event per call.

    Steps run strictly in order and the first failure ends the event. Writes
    completed before the failure are kept, so the table and the archive can
    disagree after a partial failure.
    """

    def __init__(
        self,
        city: str,
        api_key: str,
        client: WeatherClient,
        table: WeatherTable,
        archive: WeatherArchive,
        mapper: RecordMapper | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.city = city
        self.api_key = api_key
        self.client = client
        self.table = table
        self.archive = archive
        self.mapper = mapper or RecordMapper()
        self.clock = clock

    def collect(self) -> CollectionSummary:
        start_time = time.perf_counter()
        stage = CollectionStage.fetching
        logger.info("Collecting weather data", extra={"city": self.city, "stage": stage.value})

        try:
            reading = self.client.fetch(self.city, self.api_key)
            logger.info(
                "Fetched weather data",
                extra={"city": reading.name, "stage": stage.value},
            )

            stage = CollectionStage.mapping
            record = self.mapper.to_record(reading, self.clock())
            envelope = self.mapper.to_envelope(reading, record)

            stage = CollectionStage.writing_table
            self.table.put(record)
            logger.info(
                "Stored weather record",
                extra={"record_id": record.id, "stage": stage.value},
            )

            stage = CollectionStage.writing_blob
            key = self.archive.put(envelope)
            logger.info(
                "Archived weather data",
                extra={"record_id": record.id, "object_key": key, "stage": stage.value},
            )
        except WeatherServiceError as exc:
            logger.error(
                "Weather collection failed",
                exc_info=True,
                extra={"city": self.city, "stage": stage.value, "reason": type(exc).__name__},
            )
            return CollectionSummary(
                status_code=500,
                message=f"{_FAILURE_MESSAGES[stage]}: {exc}",
                stage=CollectionStage.failed,
                failed_stage=stage,
            )

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Weather data processed",
            extra={"record_id": record.id, "status_code": 200, "elapsed_ms": elapsed_ms},
        )
        return CollectionSummary(
            status_code=200,
            message="Weather data processed successfully",
            stage=CollectionStage.done,
            data=CollectionData(
                city=record.city_name,
                temperature=record.temperature,
                description=record.description,
                timestamp=record.timestamp,
                record_id=record.id,
            ),
        )


@lru_cache
def build_default_collector() -> CollectorService:
    """Factory that wires the collector from environment configuration."""
    settings = get_settings()
    client = WeatherClient(settings.weather_api_url, timeout=settings.request_timeout)
    return CollectorService(
        city=settings.city_name,
        api_key=settings.weather_api_key,
        client=client,
        table=build_default_table(),
        archive=build_default_archive(),
    )
