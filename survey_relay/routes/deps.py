"""Request dependencies resolving process-wide state from `app.state`."""

from __future__ import annotations

from fastapi import Request

from survey_relay.logic.aggregator import SubmissionAggregator
from survey_relay.models.sink_config import SinkConfig


def get_aggregator(request: Request) -> SubmissionAggregator:
    return request.app.state.aggregator


def get_sink_config(request: Request) -> SinkConfig:
    return request.app.state.config.sinks
