"""
Speech Practice v1.0 — Speech Capability Interfaces
The host platform's recognition and synthesis engines, reached only through
these protocols. Inject a concrete implementation at startup (console host,
browser bridge, test fakes).

Callbacks fire on the host's single event loop. Nothing here starts threads.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


# ─── Recognition ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RecognitionAlternative:
    transcript: str
    confidence: float  # 0-1


@dataclass(frozen=True)
class RecognitionResult:
    alternatives: tuple
    is_final: bool = False

    @property
    def best(self) -> RecognitionAlternative:
        return self.alternatives[0]


@dataclass(frozen=True)
class RecognitionEvent:
    """One `result` callback: every result so far, plus where the new ones start."""
    results: tuple
    result_index: int = 0


class RecognizerBusyError(RuntimeError):
    """Raised by SpeechRecognizer.start() when a recognition is already running."""


class SpeechRecognizer(Protocol):
    continuous: bool
    interim_results: bool
    lang: str
    on_result: Optional[Callable[[RecognitionEvent], None]]
    on_error: Optional[Callable[[str], None]]  # receives the platform error code
    on_end: Optional[Callable[[], None]]

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def abort(self) -> None: ...


# ─── Synthesis ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Voice:
    name: str
    lang: str
    local_service: bool = False  # local voices are higher quality
    default: bool = False


@dataclass
class Utterance:
    text: str
    lang: str = "en-US"
    voice: Optional[Voice] = None  # None → platform default
    rate: float = 1.0
    pitch: float = 1.0
    on_start: Optional[Callable[[], None]] = None
    on_end: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[str], None]] = None


SYNTHESIS_EVENTS = frozenset({"start", "end", "pause", "resume", "error", "voiceschanged"})


class SpeechSynthesizer(Protocol):
    def get_voices(self) -> list: ...

    def speak(self, utterance: Utterance) -> None: ...

    def cancel(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def add_listener(self, event: str, handler: Callable[..., None]) -> None: ...

    def remove_listener(self, event: str, handler: Callable[..., None]) -> None: ...


# ─── Scheduling ──────────────────────────────────────────────────────────────

Scheduler = Callable[[float, Callable[[], None]], Any]


def call_later(delay: float, callback: Callable[[], None]) -> Any:
    """
    Run `callback` after `delay` seconds on the running asyncio loop.

    Hosts without a running loop (the console host) have nothing to wait on,
    so the callback runs right away.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        callback()
        return None
    return loop.call_later(delay, callback)


# ─── Observable state ────────────────────────────────────────────────────────

class StateNotifier:
    """Lets UI code subscribe to an adapter's observable fields."""

    def __init__(self):
        self._subscribers: list = []

    def subscribe(self, callback: Callable[[Any], None]) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Any], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                # Subscriber errors never propagate into platform callbacks
                logger.error(f"State subscriber {callback!r} failed: {e}")
