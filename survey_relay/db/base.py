"""SQLAlchemy engine construction and session scope for the document store.

Engines are cached by `SinkContext`, not here. This module only knows how
to build one for a URL and how to run a unit of work against it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from survey_relay.models.survey_response import Base

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """Create an Engine for `url` and ensure the response table exists.

    For SQLite in-memory URLs, use a StaticPool so every session sees the
    same single connection.
    """
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(engine)
    logger.info("document_store.engine_created dialect=%s", engine.dialect.name)
    return engine


@contextmanager
def session_scope(engine: Engine) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    session = sessionmaker(bind=engine, future=True)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.error("DB session error; transaction rolled back", exc_info=True)
        raise
    finally:
        session.close()
