"""Upload endpoint targeted by the client-side upload proxy."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from survey_relay.errors import ConfigurationError
from survey_relay.logic.aggregator import SubmissionAggregator
from survey_relay.logic.object_store import object_name_for
from survey_relay.models.sink_config import SinkConfig
from survey_relay.models.upload import UploadedFile
from survey_relay.routes.deps import get_aggregator, get_sink_config

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/uploads",
    summary="Store uploaded survey files in the object store",
    operation_id="uploadSurveyFiles",
    tags=["Uploads"],
    response_model=List[UploadedFile],
    response_model_by_alias=True,
)
def upload_files(
    files: List[UploadFile] = File(...),
    aggregator: SubmissionAggregator = Depends(get_aggregator),
    sinks: SinkConfig = Depends(get_sink_config),
) -> List[UploadedFile]:
    if sinks.object_store is None:
        raise ConfigurationError("object store is not configured")
    stored: List[UploadedFile] = []
    for upload in files:
        data = upload.file.read()
        name = aggregator.store(data, object_name_for(upload.filename), sinks.object_store, content_type=upload.content_type)
        stored.append(UploadedFile(file_id=name, content=name))
    logger.info("uploads.stored count=%d", len(stored))
    return stored


__all__ = ["router", "upload_files"]
