"""
Shared fixtures: an in-memory fake of the host speech platform and a
practice engine backed by an in-memory history.
"""

from datetime import datetime, timedelta, timezone

import pytest

from speech_practice.practice.engine import PracticeSessionEngine
from speech_practice.practice.history import SessionHistoryRepository
from speech_practice.practice.models import PracticePhrase
from speech_practice.storage import MemoryStore
from speech_practice.voice.platform import (
    RecognitionAlternative, RecognitionEvent, RecognitionResult,
    RecognizerBusyError, SYNTHESIS_EVENTS, Voice,
)


# ─── Fake platform ───────────────────────────────────────────────────────────

class FakeRecognizer:
    """Records commands; tests drive the platform callbacks by hand."""

    def __init__(self, busy_starts: int = 0, fail_start: bool = False):
        self.continuous = True
        self.interim_results = False
        self.lang = ""
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self.calls: list = []
        self.busy_starts = busy_starts
        self.fail_start = fail_start

    def start(self):
        self.calls.append(("start", self.lang))
        if self.fail_start:
            raise OSError("microphone exploded")
        if self.busy_starts:
            self.busy_starts -= 1
            raise RecognizerBusyError("recognition has already started")

    def stop(self):
        self.calls.append(("stop",))

    def abort(self):
        self.calls.append(("abort",))

    def command_names(self) -> list:
        return [call[0] for call in self.calls]

    # Platform events

    def emit_result(self, transcript: str, confidence: float = 0.9, is_final: bool = True):
        result = RecognitionResult((RecognitionAlternative(transcript, confidence),), is_final=is_final)
        self.on_result(RecognitionEvent(results=(result,)))

    def emit_error(self, code: str):
        self.on_error(code)

    def emit_end(self):
        self.on_end()

    def say(self, transcript: str, confidence: float = 0.9):
        """A complete utterance: one final result, then end."""
        self.emit_result(transcript, confidence)
        self.emit_end()


class FakeSynthesizer:
    """
    Queues utterances instead of playing them. finish()/fail() complete the
    latest one. With auto_end=True every utterance completes inside speak().
    """

    def __init__(self, voices=None, auto_end: bool = False, error_on_cancel: bool = False):
        self.voices = list(voices) if voices is not None else []
        self.auto_end = auto_end
        self.error_on_cancel = error_on_cancel  # some platforms report cancel as an error
        self.spoken: list = []
        self.cancel_count = 0
        self.paused = False
        self.listeners: dict = {event: [] for event in SYNTHESIS_EVENTS}
        self.fail_speak = False
        self.fail_voices = False

    def get_voices(self):
        if self.fail_voices:
            raise RuntimeError("voices unavailable")
        return list(self.voices)

    def speak(self, utterance):
        if self.fail_speak:
            raise RuntimeError("audio device busy")
        self.spoken.append(utterance)
        if self.auto_end:
            utterance.on_start()
            utterance.on_end()

    def cancel(self):
        self.cancel_count += 1
        if self.error_on_cancel and self.spoken:
            self.spoken[-1].on_error("canceled")

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def add_listener(self, event, handler):
        self.listeners[event].append(handler)

    def remove_listener(self, event, handler):
        self.listeners[event].remove(handler)

    # Platform events

    @property
    def last(self):
        return self.spoken[-1]

    def begin(self):
        self.last.on_start()

    def finish(self):
        self.last.on_end()

    def fail(self, code: str = "synthesis-failed"):
        self.last.on_error(code)

    def emit(self, event: str, *args):
        for handler in list(self.listeners[event]):
            handler(*args)


class ManualScheduler:
    """Collects delayed callbacks; run() fires them."""

    def __init__(self):
        self.pending: list = []

    def __call__(self, delay, callback):
        self.pending.append((delay, callback))

    @property
    def delays(self) -> list:
        return [delay for delay, _ in self.pending]

    def run(self):
        pending, self.pending = self.pending, []
        for _, callback in pending:
            callback()


class FixedClock:
    """Deterministic clock: each call is one second after the last."""

    def __init__(self, start=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(seconds=1)
        return current


# ─── Fixtures ────────────────────────────────────────────────────────────────

VOICES = [
    Voice("Google español", "es-ES", local_service=False),
    Voice("Monica", "es-ES", local_service=True),
    Voice("Paulina", "es-MX", local_service=True),
    Voice("Samantha", "en-US", local_service=True, default=True),
    Voice("Google US English", "en-US", local_service=False),
    Voice("Thomas", "fr-FR", local_service=True),
]


@pytest.fixture
def recognizer():
    return FakeRecognizer()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer(voices=VOICES)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def history(store):
    return SessionHistoryRepository(store)


@pytest.fixture
def engine(history):
    return PracticeSessionEngine(history, clock=FixedClock())


def make_phrases(*texts, language="spanish"):
    return [
        PracticePhrase(id=f"p{i}", phrase=text, language=language)
        for i, text in enumerate(texts, start=1)
    ]


@pytest.fixture
def spanish_phrases():
    return make_phrases("Hola", "Gracias", "Buenos días")
