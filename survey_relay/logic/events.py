"""Submission and upload lifecycle events.

Events are emitted as structured log records on this module's logger; the
event type and payload ride on the record as `event_type` and
`event_payload`. Nothing is retained in process memory.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

SUBMISSION_SAVED = "submission.saved"
SUBMISSION_REJECTED = "submission.rejected"
UPLOAD_STORED = "upload.stored"


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    logger.info(
        "event_publish type=%s payload=%s",
        event_type,
        payload,
        extra={"event_type": event_type, "event_payload": payload},
    )


__all__ = ["SUBMISSION_SAVED", "SUBMISSION_REJECTED", "UPLOAD_STORED", "publish", "logger"]
