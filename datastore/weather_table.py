"""Table-store access for weather records."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import boto3
import pydantic
from boto3.dynamodb.conditions import Attr, ConditionBase
from botocore.exceptions import BotoCoreError, ClientError

from app.schemas import WeatherRecord
from datastore.mock_dynamodb import MockDynamoDBTable
from errors import NotFoundError, StoreReadError, StoreWriteError
from services.mapper import format_timestamp
from settings import get_settings

logger = logging.getLogger(__name__)

CITY_ATTRIBUTE = "cityName"
TIMESTAMP_ATTRIBUTE = "timestamp"


class WeatherTable:
    """Reads and writes :class:`WeatherRecord` items.

    ``table`` is anything exposing the boto3 ``Table`` calls ``put_item``,
    ``get_item`` and ``scan``: a real DynamoDB table resource or a
    :class:`MockDynamoDBTable`.
    """

    def __init__(self, table: Any) -> None:
        self.table = table

    def put(self, record: WeatherRecord) -> None:
        item = json.loads(record.model_dump_json(by_alias=True), parse_float=Decimal)
        try:
            self.table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise StoreWriteError(f"failed to put item to table: {exc}") from exc

    def get_by_key(self, record_id: str, timestamp: str) -> WeatherRecord:
        try:
            response = self.table.get_item(
                Key={"id": record_id, TIMESTAMP_ATTRIBUTE: timestamp}
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreReadError(f"failed to get item from table: {exc}") from exc

        item = response.get("Item")
        if item is None:
            raise NotFoundError(f"Weather record {record_id!r} at {timestamp!r} not found.")
        try:
            return WeatherRecord.model_validate(item)
        except pydantic.ValidationError as exc:
            raise StoreReadError(f"failed to decode weather record {record_id!r}: {exc}") from exc

    def query_by_city_and_window(
        self, city: str, start: datetime, end: datetime
    ) -> List[WeatherRecord]:
        """Records for ``city`` with ``start <= timestamp <= end``, oldest first."""

        condition = Attr(CITY_ATTRIBUTE).eq(city) & Attr(TIMESTAMP_ATTRIBUTE).between(
            format_timestamp(start), format_timestamp(end)
        )
        records = self._decode_items(self._scan_all(condition), city=city)
        return sorted(records, key=lambda record: record.timestamp)

    def query_by_city(self, city: str, limit: Optional[int] = None) -> List[WeatherRecord]:
        """All records for ``city`` oldest first, keeping only the newest ``limit``."""

        records = self._decode_items(
            self._scan_all(Attr(CITY_ATTRIBUTE).eq(city)), city=city
        )
        records.sort(key=lambda record: record.timestamp)
        if limit is not None and limit > 0:
            records = records[-limit:]
        return records

    def _scan_all(self, condition: ConditionBase) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        try:
            response = self.table.scan(FilterExpression=condition)
            items.extend(response.get("Items", []))
            while "LastEvaluatedKey" in response:
                response = self.table.scan(
                    FilterExpression=condition,
                    ExclusiveStartKey=response["LastEvaluatedKey"],
                )
                items.extend(response.get("Items", []))
        except (BotoCoreError, ClientError) as exc:
            raise StoreReadError(f"failed to scan weather history: {exc}") from exc
        return items

    @staticmethod
    def _decode_items(items: Iterable[Dict[str, Any]], city: str) -> List[WeatherRecord]:
        records: List[WeatherRecord] = []
        skipped = 0
        for item in items:
            try:
                records.append(WeatherRecord.model_validate(item))
            except pydantic.ValidationError as exc:
                skipped += 1
                logger.warning(
                    "Skipping malformed weather record",
                    extra={"record_id": item.get("id"), "reason": exc.error_count()},
                )
        if skipped:
            logger.warning(
                "Skipped malformed records during scan",
                extra={"city": city, "skipped": skipped, "count": len(records)},
            )
        return records


@lru_cache
def build_default_table() -> WeatherTable:
    settings = get_settings()
    if settings.storage_backend == "local":
        path = Path(settings.local_table_path) if settings.local_table_path else None
        backend: Any = MockDynamoDBTable(name=settings.table_name, persistence_path=path)
    else:
        dynamodb = boto3.resource("dynamodb", region_name=settings.region)
        backend = dynamodb.Table(settings.table_name)
    return WeatherTable(backend)
