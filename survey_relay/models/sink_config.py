"""Pydantic models describing where a submission is written.

Each sub-config is optional; an absent sub-config means the sink is
skipped. Field aliases accept the camelCase keys used by browser clients
and by the `handle_survey_submission` options mapping.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DocumentStoreConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: Optional[str] = None
    enforce_uniqueness: bool = Field(default=False, alias="enforceUniqueness")
    survey_id: Optional[str] = Field(default=None, alias="surveyId")


class SpreadsheetConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    spreadsheet_id: str = Field(alias="spreadsheetId")
    range: str
    api_key: str = Field(alias="apiKey")
    access_token: Optional[str] = Field(default=None, alias="accessToken")

    @field_validator("spreadsheet_id", "range")
    @classmethod
    def must_be_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("spreadsheet id and range must be non-empty")
        return v


class ObjectStoreConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credentials: Dict[str, Any]
    bucket: str = Field(alias="bucketName")


class SinkConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_store: Optional[DocumentStoreConfig] = Field(default=None, alias="documentStore")
    spreadsheet: Optional[SpreadsheetConfig] = None
    object_store: Optional[ObjectStoreConfig] = Field(default=None, alias="objectStore")


class SubmissionOptions(BaseModel):
    """Options accepted by `handle_survey_submission`."""

    model_config = ConfigDict(populate_by_name=True)

    mongo: bool = False
    mongo_uri: Optional[str] = Field(default=None, alias="mongoUri")
    check_duplicate: bool = Field(default=False, alias="checkDuplicate")
    google_sheet: Optional[SpreadsheetConfig] = Field(default=None, alias="googleSheet")
    gcp: Optional[ObjectStoreConfig] = None

    def to_sink_config(self) -> SinkConfig:
        document_store = None
        if self.mongo:
            document_store = DocumentStoreConfig(uri=self.mongo_uri, enforce_uniqueness=self.check_duplicate)
        return SinkConfig(
            document_store=document_store,
            spreadsheet=self.google_sheet,
            object_store=self.gcp,
        )


__all__ = [
    "DocumentStoreConfig",
    "SpreadsheetConfig",
    "ObjectStoreConfig",
    "SinkConfig",
    "SubmissionOptions",
]
