"""APIRouter registration for the submission service."""

from __future__ import annotations

from fastapi import APIRouter

from survey_relay.routes.submissions import router as submissions_router
from survey_relay.routes.uploads import router as uploads_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(submissions_router)
api_router.include_router(uploads_router)

__all__ = ["api_router"]
