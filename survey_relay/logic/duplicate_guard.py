"""Duplicate submission check keyed by respondent email.

`exists` is a point-in-time count: true iff at least one matching record
existed when the query ran. The aggregator serializes check-then-write per
key inside one process with `KeyedLock`; concurrent processes can still
race between the check and the write.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Protocol

from survey_relay.errors import MissingKeyError

logger = logging.getLogger(__name__)

UNIQUENESS_FIELDS = ("email", "Email")


class CountsDocuments(Protocol):
    def count_documents(self, filter: Mapping[str, Any]) -> int: ...


def extract_uniqueness_key(payload: Mapping[str, Any]) -> str:
    for name in UNIQUENESS_FIELDS:
        value = payload.get(name)
        if isinstance(value, str) and value.strip():
            return value
    raise MissingKeyError(UNIQUENESS_FIELDS[0])


class DuplicateGuard:
    def __init__(self, store: CountsDocuments) -> None:
        self.store = store

    def exists(self, key: str) -> bool:
        count = self.store.count_documents({"email": key})
        logger.info("duplicate_guard.checked", extra={"matches": count})
        return count > 0


class KeyedLock:
    """One lock per key, dropped once no caller holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}
        self._users: Dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


__all__ = ["UNIQUENESS_FIELDS", "extract_uniqueness_key", "DuplicateGuard", "KeyedLock"]
