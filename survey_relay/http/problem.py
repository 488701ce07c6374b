"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that produce
application/problem+json responses.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from survey_relay.errors import DuplicateSubmissionError, SinkWriteError, SurveyRelayError
from survey_relay.http.error_mapping import lookup

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem(status: int, title: str, detail: str = "", **extra: Any) -> JSONResponse:
    body: Dict[str, Any] = {"title": title, "status": status}
    if detail:
        body["detail"] = detail
    body.update(extra)
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE)


async def handle_survey_relay_error(request: Request, exc: SurveyRelayError) -> JSONResponse:  # noqa: D401
    entry = lookup(exc)
    extra: Dict[str, Any] = {"code": entry["code"]}
    if isinstance(exc, DuplicateSubmissionError):
        extra["email"] = exc.key
    if isinstance(exc, SinkWriteError):
        extra["sink"] = exc.sink
    logger.info("error_handler.handle", extra={"code": entry["code"], "path": request.url.path})
    return problem(entry["status"], entry["title"], str(exc), **extra)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    if isinstance(exc.detail, dict):
        return JSONResponse(exc.detail, status_code=exc.status_code, media_type=PROBLEM_MEDIA_TYPE, headers=exc.headers)
    resp = problem(exc.status_code, "Error", str(exc.detail or ""))
    if exc.headers:
        resp.headers.update(exc.headers)
    return resp


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]
    return problem(422, "Invalid Request", "Request validation failed", errors=errors)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error", exc_info=True)
    return problem(500, "Internal Server Error")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "handle_survey_relay_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
