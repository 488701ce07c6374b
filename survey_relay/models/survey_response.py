"""ORM model for a persisted survey response."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SurveyResponse(Base):  # type: ignore[valid-type]
    __tablename__ = "survey_response"

    id = Column(String, primary_key=True)
    survey_id = Column(String, nullable=True)
    email = Column(String, nullable=False, index=True)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "surveyId": self.survey_id,
            "email": self.email,
            "data": self.data,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


__all__ = ["SurveyResponse", "Base"]
