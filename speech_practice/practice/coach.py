"""
Speech Practice v1.0 — Practice Coach
Wires the pieces into one practice loop:

    begin → play_current (hear the phrase) → record_attempt (say it)
          → scored + recorded → next / previous → ... → session complete

The coach holds no session state of its own beyond the last feedback shown;
the engine stays the single writer of the session.
"""

import logging
from concurrent.futures import Future
from typing import Optional

from speech_practice.config import DEFAULT_LANGUAGE_TAG, PLAYBACK_RATE, VOCABULARY_SESSION_SIZE
from speech_practice.practice.engine import PracticeSessionEngine
from speech_practice.practice.models import PracticePhrase, PracticeSession
from speech_practice.practice.scorer import PronunciationFeedback, score_attempt
from speech_practice.practice.transitions import SessionStateError
from speech_practice.voice.languages import get_language_code
from speech_practice.voice.recognition import RecognitionOutcome, SpeechInputAdapter
from speech_practice.voice.synthesis import SpeakOptions, SpeechOutputAdapter

logger = logging.getLogger(__name__)


class PracticeCoach:

    def __init__(
        self,
        engine: PracticeSessionEngine,
        speech_input: SpeechInputAdapter,
        speech_output: SpeechOutputAdapter,
        playback_rate: float = PLAYBACK_RATE,
        auto_play: bool = False,
    ):
        self.engine = engine
        self.speech_input = speech_input
        self.speech_output = speech_output
        self.playback_rate = playback_rate
        self.auto_play = auto_play  # play each phrase as soon as it becomes current

        self.language: Optional[str] = None
        self.language_tag = DEFAULT_LANGUAGE_TAG
        self.last_feedback: Optional[PronunciationFeedback] = None
        self.error: Optional[str] = None
        self._phrases: list = []

    # ─── Session lifecycle ───────────────────────────────────────────────────

    def begin(self, language: str, phrases: list) -> PracticeSession:
        session = self.engine.start_session(language, phrases)
        self._prepare(language, session.phrases)
        return session

    def begin_vocabulary(self, words: list, count: int = VOCABULARY_SESSION_SIZE) -> PracticeSession:
        session = self.engine.start_vocabulary_session(words, count)
        self._prepare(session.language, session.phrases)
        return session

    def restart(self) -> PracticeSession:
        """Throw away the current run and start the same phrases again."""
        if self.language is None:
            raise SessionStateError("Nothing to restart: no session has been started")
        self.speech_output.cancel()
        self.speech_input.reset_transcript()
        self.engine.reset_session()
        return self.begin(self.language, self._phrases)

    def finish(self) -> PracticeSession:
        self.speech_output.cancel()
        return self.engine.end_session()

    def _prepare(self, language: str, phrases: list) -> None:
        self.language = language
        self.language_tag = get_language_code(language)
        self.speech_input.language_tag = self.language_tag
        self._phrases = list(phrases)
        self.last_feedback = None
        self.error = None

        if not self.language_supported:
            logger.warning(f"No voices found for language: {self.language_tag} ({language}). Using platform default.")
        self._auto_play()

    @property
    def language_supported(self) -> bool:
        """Whether a voice exists for the session language. Unknown until voices load."""
        if not self.speech_output.supported:
            return False
        if not self.speech_output.voices:
            return True
        return self.speech_output.has_voice_for(self.language_tag)

    # ─── Navigation ──────────────────────────────────────────────────────────

    def next(self) -> Optional[PracticePhrase]:
        """Next phrase, or completes the session after the last one."""
        self._clear_attempt()
        phrase = self.engine.next_phrase()
        self._auto_play()
        return phrase

    def previous(self) -> Optional[PracticePhrase]:
        self._clear_attempt()
        phrase = self.engine.previous_phrase()
        self._auto_play()
        return phrase

    def _clear_attempt(self) -> None:
        self.speech_output.cancel()
        self.speech_input.reset_transcript()
        self.last_feedback = None

    def _auto_play(self) -> None:
        if self.auto_play and self.engine.is_session_active:
            self.play_current()

    # ─── Hear / say ──────────────────────────────────────────────────────────

    def play_current(self) -> Optional[Future]:
        """Speak the current phrase slowly. None when there is no phrase."""
        phrase = self.engine.current_phrase
        if phrase is None:
            return None
        return self.speech_output.speak(
            phrase.phrase,
            self.language_tag,
            self.playback_rate,
            1.0,
            SpeakOptions(on_error=self._playback_failed),
        )

    def record_attempt(self) -> Future:
        """
        Listen for the learner's attempt at the current phrase.

        Returns a future resolving to PronunciationFeedback once the attempt
        is scored and recorded, or None when nothing was heard or the session
        moved on meanwhile.
        """
        phrase = self.engine.current_phrase
        if phrase is None or not self.engine.is_session_active:
            raise SessionStateError("No active phrase to attempt")

        self.speech_input.reset_transcript()
        self.last_feedback = None
        self.error = None

        session_id = self.engine.current_session.id
        attempt: Future = Future()
        recognition = self.speech_input.start(self.language_tag)
        recognition.add_done_callback(
            lambda done: self._score(done.result(), phrase, session_id, attempt)
        )
        return attempt

    def stop_recording(self) -> None:
        self.speech_input.stop()

    def _score(
        self, outcome: RecognitionOutcome, phrase: PracticePhrase, session_id: str, attempt: Future,
    ) -> None:
        if not outcome.heard:
            if outcome.error_code:
                self.error = self.speech_input.error or self.speech_input.status
            attempt.set_result(None)
            return

        session = self.engine.current_session
        if not self.engine.is_session_active or session is None or session.id != session_id:
            logger.info(f"Attempt at {phrase.id} arrived after the session moved on, not recorded")
            attempt.set_result(None)
            return

        feedback = score_attempt(phrase.phrase, outcome.transcript)
        try:
            self.engine.record_result(phrase.id, feedback.accuracy, outcome.transcript)
        except (SessionStateError, ValueError) as e:
            logger.error(f"Could not record attempt at {phrase.id}: {e}")
            attempt.set_exception(e)
            return

        self.last_feedback = feedback
        logger.info(f"Attempt scored: phrase={phrase.id}, accuracy={feedback.accuracy}, tier={feedback.tier.value}")
        attempt.set_result(feedback)

    def _playback_failed(self, message: str) -> None:
        self.error = f"Could not play audio: {message}"
