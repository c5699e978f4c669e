"""
Speech Practice v1.0 — Key-Value Storage
Swap backends by injecting a different store into the history repository.
Default: SQL table via SQLAlchemy. MemoryStore for tests and throwaway runs.
"""

import logging
from typing import Optional, Protocol

from sqlalchemy.orm import sessionmaker

from speech_practice.models import KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


# ─── In-memory ───────────────────────────────────────────────────────────────

class MemoryStore:
    """Dict-backed store. Lost when the process exits."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


# ─── SQL ─────────────────────────────────────────────────────────────────────

class SqlKeyValueStore:
    """Stores each key as one row of `key_value_entries`."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()
            logger.debug(f"Store: wrote {len(value)} chars to '{key}'")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
