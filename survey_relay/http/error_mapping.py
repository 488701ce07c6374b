"""Single source of truth for mapping domain errors to problem+json.

Handlers import codes and statuses from here instead of hardcoding them.
"""

from __future__ import annotations

from survey_relay.errors import (
    ConfigurationError,
    DuplicateSubmissionError,
    MissingKeyError,
    SinkWriteError,
    SurveyRelayError,
    UploadTransportError,
)

SUBMISSION_ERROR_MAP = {
    DuplicateSubmissionError: {"code": "DUPLICATE_SUBMISSION", "status": 409, "title": "Duplicate submission"},
    MissingKeyError: {"code": "UNIQUENESS_KEY_MISSING", "status": 422, "title": "Uniqueness key missing"},
    ConfigurationError: {"code": "CONFIGURATION_MISSING", "status": 503, "title": "Sink not configured"},
    SinkWriteError: {"code": "SINK_WRITE_FAILED", "status": 502, "title": "Sink write failed"},
    UploadTransportError: {"code": "UPLOAD_FAILED", "status": 502, "title": "Upload failed"},
}

FALLBACK = {"code": "SUBMISSION_FAILED", "status": 500, "title": "Submission failed"}


def lookup(exc: SurveyRelayError) -> dict:
    for cls in type(exc).__mro__:
        entry = SUBMISSION_ERROR_MAP.get(cls)  # type: ignore[call-overload]
        if entry is not None:
            return entry
    return FALLBACK


__all__ = ["SUBMISSION_ERROR_MAP", "FALLBACK", "lookup"]
