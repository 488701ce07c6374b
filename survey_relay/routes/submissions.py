"""Survey submission endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from survey_relay.http.problem import problem
from survey_relay.logic.aggregator import SubmissionAggregator
from survey_relay.models.sink_config import SinkConfig
from survey_relay.routes.deps import get_aggregator, get_sink_config

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/surveys/{survey_id}/submissions",
    summary="Submit one survey response to every configured sink",
    operation_id="submitSurveyResponse",
    tags=["Submissions"],
)
def submit_survey_response(
    survey_id: str,
    payload: Dict[str, Any] = Body(...),
    aggregator: SubmissionAggregator = Depends(get_aggregator),
    sinks: SinkConfig = Depends(get_sink_config),
):
    """Fan the payload out and report per-sink outcomes.

    201 when every configured sink succeeded, 207 when only some did, 502
    when all failed. Duplicate, missing-key and configuration errors are
    rendered by the global problem+json handlers.
    """
    if sinks.document_store is not None:
        sinks = sinks.model_copy(
            update={"document_store": sinks.document_store.model_copy(update={"survey_id": survey_id})}
        )
    result = aggregator.submit(payload, sinks)
    body = {"survey_id": survey_id, "sinks": result.to_dict()}
    failed = result.failed()
    logger.info(
        "submission.completed",
        extra={"survey_id": survey_id, "succeeded": result.succeeded(), "failed": failed},
    )
    if failed and len(failed) == len(result):
        return problem(502, "All sinks failed", "no sink accepted the submission", code="SINK_WRITE_FAILED", **body)
    return JSONResponse(body, status_code=207 if failed else 201)


__all__ = ["router", "submit_survey_response"]
