"""Submission fan-out to the configured sinks.

One response payload goes through an optional duplicate check and is then
written to the document store and the spreadsheet. Two policies govern a
failing sink:

- BEST_EFFORT_ALL: the failure is captured in the result and the next sink
  is still attempted.
- ABORT_ON_FIRST_FAILURE: the failure propagates as SinkWriteError and later
  sinks are skipped. `handle_survey_submission` uses this policy.

Duplicate and missing-key failures abort the submission under both policies
before any sink is written.
"""

from __future__ import annotations

import enum
import logging
import threading
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Dict, Mapping, Optional

from survey_relay.errors import ConfigurationError, DuplicateSubmissionError, SinkWriteError
from survey_relay.logic.duplicate_guard import DuplicateGuard, KeyedLock, extract_uniqueness_key
from survey_relay.logic.events import SUBMISSION_REJECTED, SUBMISSION_SAVED, UPLOAD_STORED, publish
from survey_relay.logic.sink_context import SinkContext
from survey_relay.models.sink_config import (
    DocumentStoreConfig,
    ObjectStoreConfig,
    SinkConfig,
    SpreadsheetConfig,
    SubmissionOptions,
)
from survey_relay.models.submission_result import (
    DOCUMENT_STORE,
    OBJECT_STORE,
    SPREADSHEET,
    SinkOutcome,
    SubmissionResult,
)

logger = logging.getLogger(__name__)


class SinkPolicy(str, enum.Enum):
    BEST_EFFORT_ALL = "best_effort_all"
    ABORT_ON_FIRST_FAILURE = "abort_on_first_failure"


def row_from_payload(payload: Mapping[str, Any]) -> list:
    """Project payload values into one spreadsheet row, in mapping order."""
    return list(payload.values())


class SubmissionAggregator:
    def __init__(self, context: SinkContext, locks: Optional[KeyedLock] = None) -> None:
        self.context = context
        self.locks = locks or KeyedLock()

    def submit(
        self,
        payload: Mapping[str, Any],
        sink_config: SinkConfig,
        policy: SinkPolicy = SinkPolicy.BEST_EFFORT_ALL,
    ) -> SubmissionResult:
        result = SubmissionResult()
        doc_cfg = sink_config.document_store

        guard_lock: ContextManager[Any] = nullcontext()
        key: Optional[str] = None
        if doc_cfg is not None and doc_cfg.enforce_uniqueness:
            key = extract_uniqueness_key(payload)
            guard_lock = self.locks.hold(key)

        with guard_lock:
            if key is not None:
                guard = DuplicateGuard(self.context.document_store(doc_cfg))  # type: ignore[arg-type]
                if guard.exists(key):
                    publish(SUBMISSION_REJECTED, {"reason": "duplicate", "survey_id": doc_cfg.survey_id})  # type: ignore[union-attr]
                    raise DuplicateSubmissionError(key)

            if doc_cfg is not None:
                self._attempt(result, DOCUMENT_STORE, lambda: self._write_document(payload, doc_cfg), policy)

        if sink_config.spreadsheet is not None:
            sheet_cfg = sink_config.spreadsheet
            self._attempt(result, SPREADSHEET, lambda: self._append_row(payload, sheet_cfg), policy)

        publish(
            SUBMISSION_SAVED,
            {
                "survey_id": doc_cfg.survey_id if doc_cfg else None,
                "succeeded": result.succeeded(),
                "failed": result.failed(),
            },
        )
        return result

    def store(self, data: bytes, name: str, config: ObjectStoreConfig, content_type: Optional[str] = None) -> str:
        """Persist a single file outside the submission fan-out."""
        object_store = self.context.object_store(config)
        try:
            identifier = object_store.store(data, name, content_type=content_type)
        except Exception as exc:
            logger.error("object_store.write_failed name=%s", name, exc_info=True)
            raise SinkWriteError(OBJECT_STORE, exc) from exc
        publish(UPLOAD_STORED, {"bucket": config.bucket, "name": identifier, "size": len(data)})
        return identifier

    def _attempt(
        self,
        result: SubmissionResult,
        sink: str,
        write: Callable[[], Any],
        policy: SinkPolicy,
    ) -> None:
        try:
            result.record(SinkOutcome(sink, value=write()))
        except ConfigurationError:
            raise
        except Exception as exc:
            error = exc if isinstance(exc, SinkWriteError) else SinkWriteError(sink, exc)
            logger.warning(
                "submission.sink_failed",
                extra={"sink": sink, "policy": policy.value, "error": str(error)},
                exc_info=True,
            )
            if policy is SinkPolicy.ABORT_ON_FIRST_FAILURE:
                raise error from exc
            result.record(SinkOutcome(sink, error=error))

    def _write_document(self, payload: Mapping[str, Any], config: DocumentStoreConfig) -> Dict[str, Any]:
        email = payload.get("email") or payload.get("Email")
        return self.context.document_store(config).save(
            {"surveyId": config.survey_id, "email": email, "data": dict(payload)}
        )

    def _append_row(self, payload: Mapping[str, Any], config: SpreadsheetConfig) -> dict:
        return self.context.spreadsheet().append(
            config.spreadsheet_id,
            config.range,
            config.api_key,
            [row_from_payload(payload)],
            access_token=config.access_token,
        )


_DEFAULT_AGGREGATOR: Optional[SubmissionAggregator] = None
_DEFAULT_LOCK = threading.Lock()


def default_aggregator() -> SubmissionAggregator:
    """Process-wide aggregator over one lazily created SinkContext."""
    global _DEFAULT_AGGREGATOR
    with _DEFAULT_LOCK:
        if _DEFAULT_AGGREGATOR is None:
            _DEFAULT_AGGREGATOR = SubmissionAggregator(SinkContext())
        return _DEFAULT_AGGREGATOR


def handle_survey_submission(
    data: Mapping[str, Any],
    options: SubmissionOptions | Mapping[str, Any],
    *,
    aggregator: Optional[SubmissionAggregator] = None,
) -> Dict[str, Any]:
    """Run one submission with the document store gating the sheet append.

    Without `aggregator` the process-wide `default_aggregator()` is used, so
    connections are shared across calls.

    Returns `{"mongo": <saved record>, "sheets": <append reply>}`, each key
    present only when its sink was configured and succeeded. A failing
    duplicate check or document-store write propagates and the sheet append
    is never attempted.
    """
    if not isinstance(options, SubmissionOptions):
        options = SubmissionOptions.model_validate(dict(options))
    if aggregator is None:
        aggregator = default_aggregator()
    result = aggregator.submit(data, options.to_sink_config(), policy=SinkPolicy.ABORT_ON_FIRST_FAILURE)
    out: Dict[str, Any] = {}
    if DOCUMENT_STORE in result:
        out["mongo"] = result[DOCUMENT_STORE].value
    if SPREADSHEET in result:
        out["sheets"] = result[SPREADSHEET].value
    return out


__all__ = [
    "SinkPolicy",
    "SubmissionAggregator",
    "default_aggregator",
    "handle_survey_submission",
    "row_from_payload",
]
