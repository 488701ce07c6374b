"""Error taxonomy for survey submission and upload handling.

Precondition failures (missing or duplicate uniqueness key) abort a whole
submission. Sink failures are either captured per sink or propagated,
depending on the fan-out policy. Upload failures never leave the upload
proxy; they are reported to the form engine through its error callback.
"""

from __future__ import annotations

from typing import Any


class SurveyRelayError(Exception):
    pass


class ConfigurationError(SurveyRelayError):
    """Required connection string or credentials absent at call time."""


class MissingKeyError(SurveyRelayError):
    def __init__(self, field: str = "email") -> None:
        super().__init__(f"{field} is required for duplicate check")
        self.field = field


class DuplicateSubmissionError(SurveyRelayError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Submission already exists for email: {key}")
        self.key = key


class SinkWriteError(SurveyRelayError):
    """A single sink's write failed; `cause` holds the collaborator error."""

    def __init__(self, sink: str, cause: BaseException | None = None, message: str | None = None) -> None:
        detail = message or (f"{type(cause).__name__}: {cause}" if cause is not None else "write failed")
        super().__init__(f"{sink} write failed: {detail}")
        self.sink = sink
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        return {"sink": self.sink, "error": type(self.cause or self).__name__, "detail": str(self)}


class UploadTransportError(SurveyRelayError):
    pass


__all__ = [
    "SurveyRelayError",
    "ConfigurationError",
    "MissingKeyError",
    "DuplicateSubmissionError",
    "SinkWriteError",
    "UploadTransportError",
]
