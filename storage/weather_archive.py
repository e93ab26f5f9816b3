"""Blob-store access for archived weather payloads."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, List

import boto3
import pydantic
from botocore.exceptions import BotoCoreError, ClientError

from app.schemas import ArchivalEnvelope
from errors import DecodeError, NotFoundError, StoreReadError, StoreWriteError
from models.records import ObjectDescriptor
from settings import get_settings
from storage.mock_s3 import MockS3Bucket

logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "weather-data"
_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def archive_key(envelope: ArchivalEnvelope) -> str:
    """``weather-data/<year>/<month>-<day>/<id>.json`` using the collection time."""
    created = envelope.created_at
    return f"{ARCHIVE_PREFIX}/{created:%Y}/{created:%m-%d}/{envelope.id}.json"


class WeatherArchive:
    """Writes and reads :class:`ArchivalEnvelope` objects in one bucket.

    ``client`` is a boto3 S3 client or a :class:`MockS3Bucket`.
    """

    def __init__(self, client: Any, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def put(self, envelope: ArchivalEnvelope) -> str:
        key = archive_key(envelope)
        body = envelope.model_dump_json(by_alias=True, indent=2).encode("utf-8")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json",
                Metadata={
                    "city": envelope.city_name,
                    "country": envelope.country,
                    "temperature": f"{envelope.temperature:.2f}",
                    "timestamp": envelope.timestamp,
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreWriteError(f"failed to upload to bucket: {exc}") from exc
        logger.debug("Archived weather payload", extra={"object_key": key})
        return key

    def get(self, key: str) -> ArchivalEnvelope:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"].read()
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                raise NotFoundError(f"Archived object {key!r} not found.") from exc
            raise StoreReadError(f"failed to get object from bucket: {exc}") from exc
        except BotoCoreError as exc:
            raise StoreReadError(f"failed to get object from bucket: {exc}") from exc

        try:
            return ArchivalEnvelope.model_validate_json(body)
        except pydantic.ValidationError as exc:
            raise DecodeError(f"failed to decode weather data at {key!r}: {exc}") from exc

    def list(self, prefix: str = ARCHIVE_PREFIX) -> List[ObjectDescriptor]:
        descriptors: List[ObjectDescriptor] = []
        kwargs: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        try:
            while True:
                response = self.client.list_objects_v2(**kwargs)
                for entry in response.get("Contents", []):
                    descriptors.append(
                        ObjectDescriptor(
                            key=entry["Key"],
                            size=int(entry.get("Size", 0)),
                            last_modified=entry.get("LastModified"),
                        )
                    )
                if not response.get("IsTruncated"):
                    break
                kwargs["ContinuationToken"] = response["NextContinuationToken"]
        except (BotoCoreError, ClientError) as exc:
            raise StoreReadError(f"failed to list objects in bucket: {exc}") from exc
        return descriptors


@lru_cache
def build_default_archive() -> WeatherArchive:
    settings = get_settings()
    if settings.storage_backend == "local":
        root = Path(settings.local_bucket_root) if settings.local_bucket_root else None
        client: Any = MockS3Bucket(name=settings.bucket_name, root_path=root)
    else:
        client = boto3.client("s3", region_name=settings.region)
    return WeatherArchive(client=client, bucket=settings.bucket_name)
