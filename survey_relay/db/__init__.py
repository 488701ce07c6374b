"""Database helpers for the document-store sink.

The DB layer stays minimal and does not leak ORM sessions into route
handlers.
"""

from survey_relay.db.base import build_engine, session_scope

__all__ = ["build_engine", "session_scope"]
