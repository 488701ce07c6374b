from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from survey_relay.config import AppConfig, load_config
from survey_relay.errors import SurveyRelayError
from survey_relay.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_survey_relay_error,
    handle_unexpected_error,
)
from survey_relay.logging_setup import configure_logging
from survey_relay.logic.aggregator import SubmissionAggregator
from survey_relay.logic.sink_context import SinkContext
from survey_relay.middleware.cors import apply_cors
from survey_relay.routes import api_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None, context: Optional[SinkContext] = None) -> FastAPI:
    """Build the FastAPI application.

    `config` defaults to `load_config()`; `context` to a fresh SinkContext.
    Both are held on `app.state` for the lifetime of the process.
    """
    configure_logging()
    config = config or load_config()
    context = context or SinkContext()

    app = FastAPI(title="Survey Relay")
    app.state.config = config
    app.state.sink_context = context
    app.state.aggregator = SubmissionAggregator(context)

    apply_cors(app, origins=config.cors_origins)

    app.add_exception_handler(SurveyRelayError, handle_survey_relay_error)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "ok"}

    @app.on_event("shutdown")
    def _close_sinks() -> None:
        context.close()

    app.include_router(api_router)
    logger.info(
        "app.created",
        extra={
            "document_store": config.sinks.document_store is not None,
            "spreadsheet": config.sinks.spreadsheet is not None,
            "object_store": config.sinks.object_store is not None,
        },
    )
    return app
