"""Long-lived holder of the clients each sink writes through.

Clients are built on first use and reused across submissions. The engine is
rebuilt when the document-store URI changes and the bucket when the
credentials or bucket name change; `invalidate()` drops everything.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Callable, Mapping, Optional

import httpx
from sqlalchemy.engine import Engine

from survey_relay.db.base import build_engine
from survey_relay.errors import ConfigurationError
from survey_relay.logic.object_store import BucketLike, ObjectStore, open_bucket
from survey_relay.logic.repository_survey_responses import DocumentStore
from survey_relay.logic.spreadsheet_client import SHEETS_API_BASE, SpreadsheetClient
from survey_relay.models.sink_config import DocumentStoreConfig, ObjectStoreConfig

logger = logging.getLogger(__name__)

BucketFactory = Callable[[Mapping[str, Any], str], BucketLike]


def _default_document_store_uri() -> Optional[str]:
    return os.environ.get("SURVEY_DOCUMENT_STORE_URI") or os.environ.get("DATABASE_URL")


class SinkContext:
    def __init__(
        self,
        *,
        http_transport: Optional[httpx.BaseTransport] = None,
        bucket_factory: BucketFactory = open_bucket,
        sheets_base_url: str = SHEETS_API_BASE,
    ) -> None:
        self._lock = threading.RLock()
        self._http_transport = http_transport
        self._bucket_factory = bucket_factory
        self._sheets_base_url = sheets_base_url

        self._engine: Optional[Engine] = None
        self._engine_uri: Optional[str] = None
        self._document_store: Optional[DocumentStore] = None
        self._http: Optional[httpx.Client] = None
        self._spreadsheet: Optional[SpreadsheetClient] = None
        self._bucket: Optional[BucketLike] = None
        self._bucket_key: Optional[str] = None

    def document_store(self, config: DocumentStoreConfig) -> DocumentStore:
        uri = config.uri or _default_document_store_uri()
        if not uri:
            raise ConfigurationError(
                "document store URI missing: set SURVEY_DOCUMENT_STORE_URI or pass a uri"
            )
        with self._lock:
            if self._document_store is None or self._engine_uri != uri:
                if self._engine is not None:
                    self._engine.dispose()
                self._engine = build_engine(uri)
                self._engine_uri = uri
                self._document_store = DocumentStore(self._engine)
            return self._document_store

    def spreadsheet(self) -> SpreadsheetClient:
        with self._lock:
            if self._spreadsheet is None:
                self._http = httpx.Client(transport=self._http_transport)
                self._spreadsheet = SpreadsheetClient(self._http, base_url=self._sheets_base_url)
            return self._spreadsheet

    def object_store(self, config: ObjectStoreConfig) -> ObjectStore:
        if not config.credentials or not config.bucket:
            raise ConfigurationError("object store credentials and bucket are required")
        key = json.dumps([config.credentials, config.bucket], sort_keys=True, default=str)
        with self._lock:
            if self._bucket is None or self._bucket_key != key:
                self._bucket = self._bucket_factory(config.credentials, config.bucket)
                self._bucket_key = key
                logger.info("object_store.bucket_opened bucket=%s", config.bucket)
            return ObjectStore(self._bucket)

    def invalidate(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
            if self._http is not None:
                self._http.close()
            self._engine = self._engine_uri = None
            self._document_store = None
            self._http = None
            self._spreadsheet = None
            self._bucket = self._bucket_key = None

    close = invalidate


__all__ = ["SinkContext", "BucketFactory"]
