"""Survey response persistence (document-store sink).

Stores each response as one row holding the full payload as JSON, with the
respondent email pulled out for duplicate lookups.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Mapping

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from survey_relay.db.base import session_scope
from survey_relay.models.survey_response import SurveyResponse

logger = logging.getLogger(__name__)

ANONYMOUS_EMAIL = "anonymous"

# Filter keys accepted by count_documents, mapped to columns
_FILTER_COLUMNS = {
    "email": SurveyResponse.email,
    "surveyId": SurveyResponse.survey_id,
}


class DocumentStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def count_documents(self, filter: Mapping[str, Any]) -> int:
        stmt = select(func.count()).select_from(SurveyResponse)
        for key, value in filter.items():
            column = _FILTER_COLUMNS.get(key)
            if column is None:
                raise ValueError(f"unsupported filter key: {key}")
            stmt = stmt.where(column == value)
        with session_scope(self.engine) as session:
            return int(session.execute(stmt).scalar_one())

    def save(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """Persist one record and return it with its assigned id and timestamp."""
        row = SurveyResponse(
            id=uuid.uuid4().hex,
            survey_id=record.get("surveyId"),
            email=record.get("email") or ANONYMOUS_EMAIL,
            data=dict(record.get("data") or {}),
        )
        with session_scope(self.engine) as session:
            session.add(row)
            session.flush()
            saved = row.to_record()
        logger.info("document_store.saved id=%s survey_id=%s", saved["id"], saved["surveyId"])
        return saved


__all__ = ["DocumentStore", "ANONYMOUS_EMAIL"]
