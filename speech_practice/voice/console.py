"""
Speech Practice v1.0 — Console Speech Platform
Terminal stand-ins for both speech capabilities:

    ConsoleSynthesizer  prints what would be spoken
    ConsoleRecognizer   reads the learner's "spoken" attempt from stdin

Both complete synchronously, so the adapters' futures are already resolved
when speak()/start() return.
"""

import logging
from typing import Callable, Optional

from speech_practice.config import LANGUAGE_CODES
from speech_practice.voice.platform import (
    RecognitionAlternative, RecognitionEvent, RecognitionResult,
    SYNTHESIS_EVENTS, Utterance, Voice,
)

logger = logging.getLogger(__name__)


def console_voices() -> list:
    """One local voice per supported language."""
    return [
        Voice(name=f"Console {name.title()}", lang=tag, local_service=True, default=(name == "english"))
        for name, tag in LANGUAGE_CODES.items()
    ]


class ConsoleSynthesizer:

    def __init__(self, output: Callable[[str], None] = print, voices: Optional[list] = None):
        self._output = output
        self._voices = list(voices) if voices is not None else console_voices()
        self._listeners: dict = {event: [] for event in SYNTHESIS_EVENTS}

    def get_voices(self) -> list:
        return list(self._voices)

    def speak(self, utterance: Utterance) -> None:
        voice = utterance.voice.name if utterance.voice else "default voice"
        if utterance.on_start:
            utterance.on_start()
        self._emit("start")
        self._output(f"🔊 [{utterance.lang}, {voice}, x{utterance.rate:g}] {utterance.text}")
        if utterance.on_end:
            utterance.on_end()
        self._emit("end")

    def cancel(self) -> None:
        pass  # nothing is ever still playing

    def pause(self) -> None:
        self._emit("pause")

    def resume(self) -> None:
        self._emit("resume")

    def add_listener(self, event: str, handler: Callable[..., None]) -> None:
        self._listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Callable[..., None]) -> None:
        if handler in self._listeners[event]:
            self._listeners[event].remove(handler)

    def _emit(self, event: str, *args) -> None:
        for handler in list(self._listeners[event]):
            handler(*args)


class ConsoleRecognizer:
    """
    Each start() reads one line as a final, fully confident transcript.
    An empty line or end of input reports `no-speech`.
    """

    def __init__(self, read_line: Callable[[str], str] = input):
        self.continuous = False
        self.interim_results = True
        self.lang = "en-US"
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self._read_line = read_line

    def start(self) -> None:
        try:
            text = self._read_line(f"🎤 ({self.lang}) Say it: ").strip()
        except EOFError:
            text = ""

        if text:
            logger.debug(f"Console recognizer heard: '{text}'")
            event = RecognitionEvent(
                results=(RecognitionResult((RecognitionAlternative(text, 1.0),), is_final=True),),
            )
            self._fire(self.on_result, event)
        else:
            self._fire(self.on_error, "no-speech")
        self._fire(self.on_end)

    def stop(self) -> None:
        pass

    def abort(self) -> None:
        pass

    @staticmethod
    def _fire(callback, *args) -> None:
        if callback is not None:
            callback(*args)
