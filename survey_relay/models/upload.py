"""Pydantic model for the upload endpoint's response items."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class UploadedFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_id: str = Field(alias="fileId")
    content: str


UPLOADED_FILES = TypeAdapter(List[UploadedFile])


__all__ = ["UploadedFile", "UPLOADED_FILES"]
