"""
Speech Practice v1.0 — Practice Session Engine
THE ORCHESTRATOR. Owns the one PracticeSession, its position and results.

States:
    IDLE      → no session (or reset)
    ACTIVE    → phrases being practiced
    COMPLETE  → finished, archived to history, read-only

Single writer: only this engine mutates the session. Each mutating call is
atomic with respect to callbacks it triggers; a callback that calls back in
(e.g. record_result from a completion listener) is rejected.
"""

import logging
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Optional

from speech_practice.config import VOCABULARY_SESSION_SIZE
from speech_practice.practice.history import SessionHistoryRepository
from speech_practice.practice.models import (
    PracticePhrase, PracticeResult, PracticeSession, VocabularyWord,
)
from speech_practice.practice.transitions import (
    SessionStateError, SessionStatus, require_transition,
)
from speech_practice.practice.vocabulary import select_practice_words, words_to_phrases

logger = logging.getLogger(__name__)


class PracticeSessionEngine:

    def __init__(
        self,
        history: SessionHistoryRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.history = history
        self._clock = clock
        self._session: Optional[PracticeSession] = None
        self._index = 0
        self._status = SessionStatus.IDLE
        self._busy: Optional[str] = None
        self._complete_listeners: list = []

        # Read once at startup
        self.history.load()

    # ─── Derived, read-only ──────────────────────────────────────────────────

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def current_session(self) -> Optional[PracticeSession]:
        return self._session

    @property
    def current_phrase_index(self) -> int:
        return self._index

    @property
    def current_phrase(self) -> Optional[PracticePhrase]:
        if self._status is SessionStatus.IDLE or self._session is None:
            return None
        if 0 <= self._index < len(self._session.phrases):
            return self._session.phrases[self._index]
        return None

    @property
    def results(self) -> tuple:
        return tuple(self._session.results) if self._session else ()

    @property
    def is_session_active(self) -> bool:
        return self._status is SessionStatus.ACTIVE

    @property
    def is_session_complete(self) -> bool:
        return self._status is SessionStatus.COMPLETE

    @property
    def session_score(self) -> int:
        return self._session.score if self._session else 0

    @property
    def progress(self) -> tuple:
        """(phrases attempted, total phrases)."""
        if self._session is None:
            return 0, 0
        return len(self._session.results), len(self._session.phrases)

    def subscribe_complete(self, callback: Callable[[PracticeSession], None]) -> None:
        """Called with the archived session each time one completes."""
        self._complete_listeners.append(callback)

    # ─── Transitions ─────────────────────────────────────────────────────────

    @contextmanager
    def _mutation(self, operation: str):
        """Guard one operation. On success the status becomes the matrix's next_status."""
        if self._busy is not None:
            raise SessionStateError(f"Cannot {operation.replace('_', ' ')} while {self._busy} is in progress")
        transition = require_transition(self._status, operation)
        self._busy = operation
        try:
            yield transition
            self._status = transition.next_status
        finally:
            self._busy = None

    def start_session(self, language: str, phrases: list) -> PracticeSession:
        """IDLE/COMPLETE → ACTIVE. Empty phrase list or repeated phrase ids raise ValueError."""
        if not phrases:
            raise ValueError("Cannot start a session with no phrases")

        counts = Counter(p.id for p in phrases)
        repeated = sorted(pid for pid, n in counts.items() if n > 1)
        if repeated:
            raise ValueError(f"Phrase ids must be unique within a session, repeated: {repeated}")

        with self._mutation("start_session"):
            self._session = PracticeSession(
                language=language,
                start_time=self._clock(),
                phrases=list(phrases),
            )
            self._index = 0

        logger.info(f"Session {self._session.id} started: {language}, {len(phrases)} phrases")
        return self._session

    def start_vocabulary_session(self, words: list, count: int = VOCABULARY_SESSION_SIZE) -> PracticeSession:
        """Practice up to `count` words, unmastered ones first."""
        if not words:
            raise ValueError("Cannot start a session with no words")
        if count < 1:
            raise ValueError(f"Cannot start a session with count={count}")

        selected: list[VocabularyWord] = select_practice_words(words, count)
        phrases = words_to_phrases(selected)
        return self.start_session(phrases[0].language, phrases)

    def record_result(self, phrase_id: str, accuracy: int, user_transcript: str = "") -> PracticeResult:
        """Store the result for a phrase, replacing any earlier attempt at it."""
        with self._mutation("record_result"):
            if not self._session.has_phrase(phrase_id):
                raise ValueError(f"Phrase {phrase_id!r} is not part of session {self._session.id}")

            result = PracticeResult(
                phrase_id=phrase_id,
                accuracy=accuracy,
                user_transcript=user_transcript or "",
                timestamp=self._clock(),
            )
            self._session.upsert_result(result)

        logger.info(f"Result recorded: phrase={phrase_id}, accuracy={accuracy}")
        return result

    def next_phrase(self) -> Optional[PracticePhrase]:
        """Advance. On the last phrase this ends the session instead."""
        with self._mutation("next_phrase"):
            is_last = self._index + 1 >= len(self._session.phrases)
            if not is_last:
                self._index += 1

        if is_last:
            self.end_session()
            return None
        return self.current_phrase

    def previous_phrase(self) -> Optional[PracticePhrase]:
        """Step back. No-op on the first phrase."""
        with self._mutation("previous_phrase"):
            if self._index > 0:
                self._index -= 1
        return self.current_phrase

    def end_session(self) -> PracticeSession:
        """ACTIVE → COMPLETE. Stamps end_time and archives to history."""
        with self._mutation("end_session"):
            self._session.end_time = self._clock()
            self._session.completed = True
            completed = self._session
            self.history.append(completed)

        logger.info(
            f"Session {completed.id} complete: score={completed.score}, "
            f"{len(completed.results)}/{len(completed.phrases)} phrases attempted"
        )

        for callback in list(self._complete_listeners):
            try:
                callback(completed)
            except Exception as e:
                logger.error(f"Session completion listener {callback!r} failed: {e}")

        return completed

    def reset_session(self) -> None:
        """Any status → IDLE. Discards an unfinished session without archiving it."""
        with self._mutation("reset_session"):
            if self._status is SessionStatus.ACTIVE:
                logger.info(f"Session {self._session.id} discarded")
            self._session = None
            self._index = 0

