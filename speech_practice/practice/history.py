"""
Speech Practice v1.0 — Session History Repository
Completed sessions, stored as one JSON array under a fixed key.

Load once at startup, append after every completed session.
Missing or corrupt data means an empty history, never a crash.
A store that fails to read is never overwritten: sessions wait in memory
until a later read succeeds.
"""

import json
import logging
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from speech_practice.config import HISTORY_STORAGE_KEY
from speech_practice.practice.models import PracticeSession, round_half_up
from speech_practice.storage import KeyValueStore

logger = logging.getLogger(__name__)

_SESSION_LIST = TypeAdapter(list[PracticeSession])


class SessionHistoryRepository:
    """Chronological log of completed practice sessions."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_STORAGE_KEY):
        self._store = store
        self._key = key
        self._sessions: Optional[list] = None
        # Completed while the store could not be read; merged in on the next good read
        self._unsaved: list = []

    @property
    def sessions(self) -> list:
        """All completed sessions, oldest first."""
        return list(self.load())

    def load(self) -> list:
        """
        Read the stored history. Only the first successful read touches the store.

        A store that raises is not the same as an empty history: nothing is
        cached, and the next call reads again.
        """
        if self._sessions is None:
            stored = self._read()
            if stored is None:
                return list(self._unsaved)
            self._sessions = stored + self._unsaved
            if self._unsaved:
                self._unsaved = []
                self._save()
        return self._sessions

    def append(self, session: PracticeSession) -> None:
        """Add a completed session and persist the whole log."""
        copy = session.model_copy(deep=True)
        self.load()
        if self._sessions is None:
            self._unsaved.append(copy)
            logger.error(f"Practice history unreadable, session {session.id} not saved yet")
            return
        self._sessions.append(copy)
        self._save()

    def clear(self) -> None:
        self._sessions = []
        self._unsaved = []
        self._save()

    def recent(self, limit: int = 10) -> list:
        """Newest first."""
        return list(reversed(self.load()))[:limit]

    def average_score(self, language: Optional[str] = None) -> int:
        """Mean session score, optionally for one language. 0 with no sessions."""
        scores = [
            s.score for s in self.load()
            if language is None or s.language.lower() == language.lower()
        ]
        if not scores:
            return 0
        return round_half_up(sum(scores) / len(scores))

    def _read(self) -> Optional[list]:
        """Stored sessions. [] when missing or corrupt, None when the store failed."""
        try:
            raw = self._store.get(self._key)
        except Exception as e:
            logger.error(f"Error loading practice history: {e}")
            return None

        if not raw:
            return []

        try:
            sessions = _SESSION_LIST.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Discarding unreadable practice history: {e}")
            return []

        logger.info(f"Loaded {len(sessions)} practice sessions from history")
        return sessions

    def _save(self) -> None:
        payload = json.dumps([s.to_record() for s in self._sessions])
        try:
            self._store.set(self._key, payload)
        except Exception as e:
            logger.error(f"Error saving practice history: {e}")
