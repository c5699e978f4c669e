"""
Speech Practice v1.0 — Speech Input Adapter
Wraps the platform SpeechRecognizer. One utterance per attempt
(continuous=False, interim results on).

Never raises: platform failures become `error` (persistent, dismissible) or
`status` (transient, network only). `is_listening` flips back to False only
when the platform reports end-of-recognition or an error; stop() just asks.
No timeout: a silent learner keeps the recognizer open until the platform
itself reports `no-speech`.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from speech_practice.config import (
    DEFAULT_LANGUAGE_TAG,
    RECOGNITION_RESTART_DELAY_SECONDS,
    NETWORK_RETRY_DELAY_SECONDS,
)
from speech_practice.voice.platform import (
    RecognitionEvent, RecognizerBusyError, Scheduler, SpeechRecognizer,
    StateNotifier, call_later,
)

logger = logging.getLogger(__name__)


# ─── Messages ────────────────────────────────────────────────────────────────

ERROR_MESSAGES = {
    "no-speech": "No speech was detected. Please try again.",
    "audio-capture": "No microphone was found or microphone is disabled.",
    "not-allowed": "Microphone permission was denied. Please allow microphone access.",
    "network": "A network error occurred. Speech recognition requires internet connection.",
    "aborted": "Speech recognition was aborted.",
    "service-not-allowed": "Speech recognition service is not allowed.",
}

NOT_SUPPORTED_MESSAGE = "Speech recognition not supported on this platform"
INIT_ERROR_MESSAGE = "Error initializing speech recognition"
START_ERROR_MESSAGE = "Error starting speech recognition"
STOP_ERROR_MESSAGE = "Error stopping speech recognition"
RECONNECTING_MESSAGE = "Attempting to reconnect..."

# Adapter-level outcome codes (platform codes pass through unchanged)
NOT_SUPPORTED = "not-supported"
START_FAILED = "start-failed"
SUPERSEDED = "superseded"


def error_message(code: str) -> str:
    """Human-readable message for a platform error code."""
    return ERROR_MESSAGES.get(code, f"Error: {code}")


@dataclass
class RecognitionOutcome:
    """What one recording attempt produced. Resolves the future from start()."""
    transcript: str
    confidence: int  # 0-100
    error_code: Optional[str] = None

    @property
    def heard(self) -> bool:
        return self.error_code is None and bool(self.transcript.strip())


def _resolved(outcome: RecognitionOutcome) -> Future:
    future: Future = Future()
    future.set_result(outcome)
    return future


class SpeechInputAdapter(StateNotifier):
    """
    Speech-to-text for one learner attempt at a time.

    Observable fields: transcript, confidence, is_listening, error, status.
    """

    def __init__(
        self,
        recognizer: Optional[SpeechRecognizer],
        language_tag: str = DEFAULT_LANGUAGE_TAG,
        scheduler: Scheduler = call_later,
        restart_delay: float = RECOGNITION_RESTART_DELAY_SECONDS,
        network_retry_delay: float = NETWORK_RETRY_DELAY_SECONDS,
    ):
        super().__init__()
        self.language_tag = language_tag
        self.transcript = ""
        self.confidence = 0
        self.error: Optional[str] = None
        self.error_code: Optional[str] = None
        self.status: Optional[str] = None

        self._scheduler = scheduler
        self._restart_delay = restart_delay
        self._network_retry_delay = network_retry_delay
        self._listening = False
        self._restart_pending = False
        self._recovering = False
        self._pending: Optional[Future] = None
        self._recognizer: Optional[SpeechRecognizer] = None

        if recognizer is None:
            self.supported = False
            self.error = NOT_SUPPORTED_MESSAGE
            logger.warning("Speech recognition unavailable: no recognizer on this platform")
            return

        try:
            recognizer.continuous = False
            recognizer.interim_results = True
            recognizer.lang = language_tag
            recognizer.on_result = self._handle_result
            recognizer.on_error = self._handle_error
            recognizer.on_end = self._handle_end
        except Exception as e:
            logger.error(f"Error initializing speech recognition: {e}")
            self.supported = False
            self.error = INIT_ERROR_MESSAGE
            return

        self._recognizer = recognizer
        self.supported = True

    @property
    def is_listening(self) -> bool:
        return self._listening

    # ─── Commands ────────────────────────────────────────────────────────────

    def start(self, language_tag: Optional[str] = None) -> Future:
        """
        Begin listening for one utterance.

        Returns a future resolving to a RecognitionOutcome when the platform
        reports end or error. Never raises.
        """
        if not self.supported:
            return _resolved(RecognitionOutcome("", 0, NOT_SUPPORTED))

        if self._pending is not None and not self._pending.done():
            self._finish(SUPERSEDED)

        tag = language_tag or self.language_tag
        self.error = None
        self.error_code = None
        self.transcript = ""
        self._listening = True
        self._restart_pending = False
        self._recovering = False
        future: Future = Future()
        self._pending = future

        try:
            self._recognizer.lang = tag
            self._recognizer.start()
            logger.info(f"Recognition started: lang={tag}")
        except RecognizerBusyError:
            # Previous recognition still winding down: stop it, start again shortly
            logger.warning(f"Recognizer already running, restarting in {self._restart_delay}s")
            self._restart_pending = True
            try:
                self._recognizer.stop()
            except Exception as e:
                logger.error(f"Error stopping busy recognizer: {e}")
            self._scheduler(self._restart_delay, self._restart)
        except Exception as e:
            logger.error(f"Speech recognition error on start: {e}")
            self.error = START_ERROR_MESSAGE
            self._listening = False
            self._finish(START_FAILED)

        self._notify()
        return future

    def stop(self) -> None:
        """Ask the platform to finish early. No-op when not listening."""
        if not self.supported or not self._listening:
            return

        if self._restart_pending:
            # Nothing running yet: cancel the restart and end the attempt here
            self._restart_pending = False
            self._listening = False
            self._finish(None)
            self._notify()
            return

        try:
            self._recognizer.stop()
        except Exception as e:
            logger.error(f"Speech recognition error on stop: {e}")
            self.error = STOP_ERROR_MESSAGE
            self._notify()

    def reset_transcript(self) -> None:
        """Clear transcript and confidence. Listening state is untouched."""
        self.transcript = ""
        self.confidence = 0
        self._notify()

    def dismiss_error(self) -> None:
        self.error = None
        self._notify()

    def close(self) -> None:
        """Abort any recognition and detach from the platform recognizer."""
        if not self.supported:
            return
        self._restart_pending = False
        try:
            self._recognizer.abort()
        except Exception as e:
            logger.error(f"Error aborting speech recognition: {e}")
        self._recognizer.on_result = None
        self._recognizer.on_error = None
        self._recognizer.on_end = None
        self._listening = False
        self._finish("aborted")
        self.supported = False

    # ─── Platform callbacks ──────────────────────────────────────────────────

    def _restart(self) -> None:
        if not self._restart_pending:
            return  # stopped or superseded while waiting
        self._restart_pending = False
        try:
            self._recognizer.start()
            logger.info("Recognition restarted")
        except Exception as e:
            logger.error(f"Speech recognition error on restart: {e}")
            self.error = START_ERROR_MESSAGE
            self._listening = False
            self._finish(START_FAILED)
            self._notify()

    def _handle_result(self, event: RecognitionEvent) -> None:
        try:
            final_transcript = ""
            max_confidence = 0.0

            for result in event.results[event.result_index:]:
                if not result.alternatives:
                    continue
                best = result.best
                if best.confidence > max_confidence:
                    max_confidence = best.confidence
                if result.is_final:
                    final_transcript += best.transcript

            if final_transcript:
                self.transcript = final_transcript
            elif event.results and event.results[-1].alternatives:
                self.transcript = event.results[-1].best.transcript

            self.confidence = max(0, min(100, int(max_confidence * 100 + 0.5)))
            self.status = None  # recognizer is working again
            logger.debug(f"Recognition result: conf={self.confidence}, text='{self.transcript[:50]}'")
        except Exception as e:
            logger.error(f"Error processing recognition result: {e}")
        self._notify()

    def _handle_error(self, code: str) -> None:
        if code == "aborted" and self._recovering:
            logger.debug("Ignoring abort reported by network recovery")
            return

        message = error_message(code)
        self.error_code = code
        self._listening = False
        self._restart_pending = False

        if code == "network":
            logger.warning(f"Speech recognition network error, retrying in {self._network_retry_delay}s")
            self.status = message
            self._scheduler(self._network_retry_delay, self._recover_from_network)
        else:
            logger.error(f"Speech recognition error: {code}")
            self.error = message
            self.status = None

        self._finish(code)
        self._notify()

    def _recover_from_network(self) -> None:
        if self._listening:
            return  # learner already started a fresh attempt
        self.status = RECONNECTING_MESSAGE
        self._recovering = True
        try:
            self._recognizer.abort()
        except Exception as e:
            logger.debug(f"Ignoring abort error during network recovery: {e}")
        self._notify()

    def _handle_end(self) -> None:
        if self._restart_pending:
            logger.debug("Ignoring end event from the recognition being restarted")
            return
        self._listening = False
        self._finish(None)
        self._notify()

    def _finish(self, error_code: Optional[str]) -> None:
        future, self._pending = self._pending, None
        if future is not None and not future.done():
            future.set_result(RecognitionOutcome(self.transcript, self.confidence, error_code))
