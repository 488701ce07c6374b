"""Single-file persistence to a Google Cloud Storage bucket."""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, Mapping, Optional, Protocol

from google.cloud import storage
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class BucketLike(Protocol):
    name: str

    def blob(self, blob_name: str) -> Any: ...


def open_bucket(credentials: Mapping[str, Any], bucket_name: str) -> storage.Bucket:
    """Build a storage client from service-account info and return the bucket handle.

    No request is made until a blob is written.
    """
    creds = service_account.Credentials.from_service_account_info(dict(credentials))
    client = storage.Client(project=credentials.get("project_id"), credentials=creds)
    return client.bucket(bucket_name)


def object_name_for(filename: Optional[str]) -> str:
    base = _UNSAFE_NAME_CHARS.sub("_", (filename or "").strip()).strip("._") or "upload"
    return f"{uuid.uuid4().hex}-{base}"


class ObjectStore:
    def __init__(self, bucket: BucketLike) -> None:
        self.bucket = bucket

    def store(self, data: bytes, name: str, content_type: Optional[str] = None) -> str:
        """Write `data` as object `name` and return the stored object's name."""
        blob = self.bucket.blob(name)
        blob.upload_from_string(bytes(data), content_type=content_type)
        logger.info("object_store.saved bucket=%s name=%s size=%d", self.bucket.name, blob.name, len(data))
        return blob.name


__all__ = ["BucketLike", "ObjectStore", "open_bucket", "object_name_for"]
