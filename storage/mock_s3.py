from __future__ import annotations
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from botocore.exceptions import ClientError

_METADATA_SUFFIX = ".metadata.json"


@dataclass
class _StoredObject:
    body: bytes
    content_type: str = "binary/octet-stream"
    metadata: Dict[str, str] = field(default_factory=dict)
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MockS3Bucket:
    """Local stand-in for the boto3 S3 client, scoped to a single bucket.

    Supports ``put_object``, ``get_object`` and ``list_objects_v2``. Missing keys
    raise ``ClientError`` with code ``NoSuchKey`` like the real service. When
    ``root_path`` is set, bodies are mirrored to disk with a metadata sidecar.
    """

    def __init__(self, name: str, root_path: Optional[Path] = None) -> None:
        self.name = name
        self._objects: Dict[str, _StoredObject] = {}
        self.root_path = root_path
        self._lock = Lock()
        if root_path:
            root_path.mkdir(parents=True, exist_ok=True)
            self._load_existing_objects()

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes | str,
        ContentType: str = "binary/octet-stream",
        Metadata: Optional[Dict[str, str]] = None,
        **_: Any,
    ) -> Dict[str, Any]:
        self._check_bucket(Bucket, "PutObject")
        data = Body.encode("utf-8") if isinstance(Body, str) else bytes(Body)
        stored = _StoredObject(
            body=data, content_type=ContentType, metadata=dict(Metadata or {})
        )
        with self._lock:
            self._objects[Key] = stored
            if self.root_path:
                path = self.root_path / Key
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(data)
                sidecar = {"ContentType": stored.content_type, "Metadata": stored.metadata}
                path.with_name(path.name + _METADATA_SUFFIX).write_text(json.dumps(sidecar))
        return {}

    def get_object(self, *, Bucket: str, Key: str, **_: Any) -> Dict[str, Any]:
        self._check_bucket(Bucket, "GetObject")
        with self._lock:
            stored = self._objects.get(Key)
        if stored is None:
            raise ClientError(
                {
                    "Error": {
                        "Code": "NoSuchKey",
                        "Message": f"Object with key {Key!r} not found in bucket {self.name!r}.",
                    },
                    "ResponseMetadata": {"HTTPStatusCode": 404},
                },
                "GetObject",
            )
        return {
            "Body": io.BytesIO(stored.body),
            "ContentType": stored.content_type,
            "ContentLength": len(stored.body),
            "Metadata": dict(stored.metadata),
            "LastModified": stored.last_modified,
        }

    def list_objects_v2(
        self,
        *,
        Bucket: str,
        Prefix: str = "",
        MaxKeys: int = 1000,
        ContinuationToken: Optional[str] = None,
        **_: Any,
    ) -> Dict[str, Any]:
        self._check_bucket(Bucket, "ListObjectsV2")
        with self._lock:
            keys = sorted(key for key in self._objects if key.startswith(Prefix))
            if ContinuationToken is not None:
                keys = [key for key in keys if key > ContinuationToken]
            page = keys[:MaxKeys]
            contents = [
                {
                    "Key": key,
                    "Size": len(self._objects[key].body),
                    "LastModified": self._objects[key].last_modified,
                }
                for key in page
            ]

        truncated = len(keys) > MaxKeys
        response: Dict[str, Any] = {
            "Name": self.name,
            "Prefix": Prefix,
            "KeyCount": len(contents),
            "IsTruncated": truncated,
        }
        if contents:
            response["Contents"] = contents
        if truncated:
            response["NextContinuationToken"] = page[-1]
        return response

    def _check_bucket(self, bucket: str, operation: str) -> None:
        if bucket == self.name:
            return
        raise ClientError(
            {
                "Error": {"Code": "NoSuchBucket", "Message": f"Bucket {bucket!r} does not exist."},
                "ResponseMetadata": {"HTTPStatusCode": 404},
            },
            operation,
        )

    def _load_existing_objects(self) -> None:
        assert self.root_path is not None
        for path in self.root_path.rglob("*"):
            if not path.is_file() or path.name.endswith(_METADATA_SUFFIX):
                continue
            key = path.relative_to(self.root_path).as_posix()
            stored = _StoredObject(
                body=path.read_bytes(),
                last_modified=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
            )
            sidecar = path.with_name(path.name + _METADATA_SUFFIX)
            if sidecar.exists():
                try:
                    details = json.loads(sidecar.read_text())
                except (OSError, json.JSONDecodeError):
                    details = {}
                stored.content_type = details.get("ContentType", stored.content_type)
                stored.metadata = dict(details.get("Metadata", {}))
            self._objects[key] = stored
