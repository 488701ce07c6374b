"""Functional tests for the HTTP surface (TestClient, in-process)."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from survey_relay.config import AppConfig
from survey_relay.http.problem import PROBLEM_MEDIA_TYPE
from survey_relay.main import create_app
from survey_relay.models.sink_config import SinkConfig


@pytest.fixture
def make_client(context):
    def _make(sinks: SinkConfig) -> TestClient:
        return TestClient(create_app(AppConfig(sinks=sinks, cors_origins=["https://survey.example"]), context))

    return _make


def test_health(make_client):
    resp = make_client(SinkConfig()).get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_submission_to_both_sinks_returns_201(make_client, doc_config, sheet_config, sheets, context):
    client = make_client(SinkConfig(document_store=doc_config, spreadsheet=sheet_config))

    resp = client.post("/api/v1/surveys/tedx-2024/submissions", json={"name": "Ann", "email": "a@x.com"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["survey_id"] == "tedx-2024"
    assert body["sinks"]["document_store"]["ok"] is True
    assert body["sinks"]["document_store"]["result"]["surveyId"] == "tedx-2024"
    assert body["sinks"]["spreadsheet"]["ok"] is True
    assert sheets.rows == [["Ann", "a@x.com"]]
    assert context.document_store(doc_config).count_documents({"surveyId": "tedx-2024"}) == 1


def test_duplicate_submission_is_409_problem(make_client, doc_config, sheets):
    doc_config.enforce_uniqueness = True
    client = make_client(SinkConfig(document_store=doc_config))

    assert client.post("/api/v1/surveys/s1/submissions", json={"email": "a@x.com"}).status_code == 201
    resp = client.post("/api/v1/surveys/s1/submissions", json={"email": "a@x.com"})

    assert resp.status_code == 409
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    assert resp.json()["code"] == "DUPLICATE_SUBMISSION"
    assert resp.json()["email"] == "a@x.com"


def test_missing_email_is_422_problem(make_client, doc_config):
    doc_config.enforce_uniqueness = True
    resp = make_client(SinkConfig(document_store=doc_config)).post("/api/v1/surveys/s1/submissions", json={"name": "Ann"})

    assert resp.status_code == 422
    assert resp.json()["code"] == "UNIQUENESS_KEY_MISSING"


def test_partial_failure_is_207(make_client, doc_config, sheet_config, sheets):
    sheets.status = 503
    resp = make_client(SinkConfig(document_store=doc_config, spreadsheet=sheet_config)).post(
        "/api/v1/surveys/s1/submissions", json={"email": "a@x.com"}
    )

    assert resp.status_code == 207
    assert resp.json()["sinks"]["spreadsheet"]["ok"] is False
    assert resp.json()["sinks"]["spreadsheet"]["sink"] == "spreadsheet"


def test_all_sinks_failing_is_502_problem(make_client, sheet_config, sheets):
    sheets.status = 500
    resp = make_client(SinkConfig(spreadsheet=sheet_config)).post("/api/v1/surveys/s1/submissions", json={"q": 1})

    assert resp.status_code == 502
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    assert resp.json()["code"] == "SINK_WRITE_FAILED"


def test_upload_endpoint_stores_files(make_client, object_config, bucket_factory):
    client = make_client(SinkConfig(object_store=object_config))

    resp = client.post(
        "/api/v1/uploads",
        files=[
            ("files", ("résumé 2024.pdf", b"%PDF-1.7", "application/pdf")),
            ("files", ("photo.png", b"\x89PNG", "image/png")),
        ],
    )

    assert resp.status_code == 200
    items = resp.json()
    assert [set(item) for item in items] == [{"fileId", "content"}, {"fileId", "content"}]
    stored = bucket_factory.buckets[0].objects
    assert stored[items[0]["fileId"]] == (b"%PDF-1.7", "application/pdf")
    assert items[1]["fileId"].endswith("-photo.png")
    assert " " not in items[0]["fileId"]


def test_upload_without_object_store_is_503(make_client):
    resp = make_client(SinkConfig()).post("/api/v1/uploads", files=[("files", ("a.txt", b"a", "text/plain"))])

    assert resp.status_code == 503
    assert resp.json()["code"] == "CONFIGURATION_MISSING"


def test_non_object_body_is_422(make_client):
    resp = make_client(SinkConfig()).post("/api/v1/surveys/s1/submissions", json=["not", "an", "object"])

    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
