"""Shared fixtures for functional tests.

The document store runs on in-memory SQLite (one fresh database per
SinkContext), the Sheets API and the upload endpoint are served by
httpx.MockTransport, and the object-store bucket is an in-memory fake.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Any, Dict, List

import httpx
import pytest

from survey_relay.client.form_engine import CHANNEL_NAMES, EventChannel, FormInstance
from survey_relay.logic.sink_context import SinkContext
from survey_relay.models.sink_config import DocumentStoreConfig, ObjectStoreConfig, SpreadsheetConfig

SQLITE_MEMORY = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def published_events(caplog):
    """Event types logged by survey_relay.logic.events during the test."""
    caplog.set_level(logging.INFO, logger="survey_relay.logic.events")

    def _types() -> List[str]:
        return [r.event_type for r in caplog.records if r.name == "survey_relay.logic.events"]

    return _types


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name

    def upload_from_string(self, data: bytes, content_type: str | None = None) -> None:
        if self.bucket.fail:
            raise RuntimeError("bucket unavailable")
        self.bucket.objects[self.name] = (bytes(data), content_type)


class FakeBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self.objects: Dict[str, tuple] = {}
        self.fail = False

    def blob(self, blob_name: str) -> FakeBlob:
        return FakeBlob(self, blob_name)


class FakeBucketFactory:
    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.buckets: List[FakeBucket] = []

    def __call__(self, credentials: Dict[str, Any], bucket_name: str) -> FakeBucket:
        self.calls.append((dict(credentials), bucket_name))
        bucket = FakeBucket(bucket_name)
        self.buckets.append(bucket)
        return bucket


class SheetsStub:
    """Records append calls; `status` controls the reply."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status >= 400:
            return httpx.Response(self.status, json={"error": {"code": self.status, "message": "quota"}})
        return httpx.Response(
            200,
            json={"spreadsheetId": "sheet-1", "updates": {"updatedRange": "Sheet1!A2:B2", "updatedRows": 1}},
        )

    @property
    def rows(self) -> List[list]:
        out: List[list] = []
        for req in self.requests:
            out.extend(json.loads(req.content)["values"])
        return out

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def sheets() -> SheetsStub:
    return SheetsStub()


@pytest.fixture
def bucket_factory() -> FakeBucketFactory:
    return FakeBucketFactory()


@pytest.fixture
def context(sheets: SheetsStub, bucket_factory: FakeBucketFactory):
    ctx = SinkContext(http_transport=sheets.transport, bucket_factory=bucket_factory)
    yield ctx
    ctx.close()


@pytest.fixture
def doc_config() -> DocumentStoreConfig:
    return DocumentStoreConfig(uri=SQLITE_MEMORY)


@pytest.fixture
def sheet_config() -> SpreadsheetConfig:
    return SpreadsheetConfig(spreadsheet_id="sheet-1", range="Sheet1!A1", api_key="key-123")


@pytest.fixture
def object_config() -> ObjectStoreConfig:
    return ObjectStoreConfig(credentials={"project_id": "demo", "client_email": "svc@demo"}, bucket="survey-files")


class RecordingChannel(EventChannel):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.added: Counter = Counter()
        self.removed: Counter = Counter()

    def add(self, handler) -> None:
        self.added[handler] += 1
        super().add(handler)

    def remove(self, handler) -> bool:
        self.removed[handler] += 1
        return super().remove(handler)


@pytest.fixture
def survey_schema() -> Dict[str, Any]:
    return {
        "pages": [
            {
                "elements": [
                    {"type": "text", "name": "name"},
                    {"type": "text", "name": "email"},
                    {"type": "file", "name": "cv"},
                ]
            }
        ]
    }


@pytest.fixture
def recording_form(survey_schema: Dict[str, Any]) -> FormInstance:
    form = FormInstance(survey_schema)
    form.channels = {name: RecordingChannel(name) for name in CHANNEL_NAMES}
    return form


