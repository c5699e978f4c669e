"""
Speech Practice v1.0 — Speech Output Adapter
Wraps the platform SpeechSynthesizer. Picks the best voice for a language,
plays one utterance at a time (a new speak() cancels the old one), exposes
pause/resume and observable is_speaking / is_paused flags.

Voice lists can arrive late: the adapter re-reads them on `voiceschanged`.
An unmatched language never raises; the platform default voice is used.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

from speech_practice.config import (
    DEFAULT_LANGUAGE_TAG, SPEECH_RATE_RANGE, SPEECH_PITCH_RANGE,
)
from speech_practice.voice.clean_for_tts import clean_pronunciation
from speech_practice.voice.languages import base_language, normalize_tag
from speech_practice.voice.platform import (
    SpeechSynthesizer, StateNotifier, Utterance, Voice,
)

logger = logging.getLogger(__name__)

NOT_SUPPORTED_MESSAGE = "Text-to-speech not supported on this platform"
CANCELED = "canceled"


@dataclass
class SpeakOptions:
    on_start: Optional[Callable[[], None]] = None
    on_end: Optional[Callable[[], None]] = None
    on_error: Optional[Callable[[str], None]] = None
    preferred_voice: Optional[Voice] = None
    emphasize_words: bool = False  # True → speak text verbatim, skip clean-up


@dataclass
class SpeechOutcome:
    """Resolves the future returned by speak()."""
    completed: bool
    error: Optional[str] = None
    voice: Optional[Voice] = None


def _clamp(value: float, bounds: tuple) -> float:
    low, high = bounds
    return max(low, min(high, value))


def _resolved(outcome: SpeechOutcome) -> Future:
    future: Future = Future()
    future.set_result(outcome)
    return future


# ─── Voice selection ─────────────────────────────────────────────────────────

def sort_voices(voices: list) -> list:
    """Language tag, then local (higher quality) before remote, then name."""
    return sorted(voices, key=lambda v: (v.lang, not v.local_service, v.name))


def _prefer_local(candidates: list) -> Voice:
    return next((v for v in candidates if v.local_service), candidates[0])


def get_best_voice_for_language(voices: list, language_tag: str) -> Optional[Voice]:
    """
    Best voice for a BCP-47 tag.

    Exact tag match beats a same-language dialect ("es-MX" for "es-ES");
    within each group local voices beat remote ones. None when nothing
    matches, meaning "let the platform decide".
    """
    if not voices:
        logger.warning("No voices available for selection")
        return None

    wanted = normalize_tag(language_tag)
    exact = [v for v in voices if normalize_tag(v.lang) == wanted]
    if exact:
        return _prefer_local(exact)

    base = base_language(language_tag)
    same_language = [v for v in voices if base_language(v.lang) == base]
    if same_language:
        return _prefer_local(same_language)

    logger.warning(f"No matching voice found for {language_tag}")
    return None


class SpeechOutputAdapter(StateNotifier):
    """
    Text-to-speech with voice selection.

    Observable fields: is_speaking, is_paused, voices, current_voice, error.
    """

    def __init__(self, synthesizer: Optional[SpeechSynthesizer]):
        super().__init__()
        self.voices: list = []
        self.current_voice: Optional[Voice] = None
        self.error: Optional[str] = None

        self._speaking = False
        self._paused = False
        self._utterance: Optional[Utterance] = None
        self._pending: Optional[Future] = None
        self._synth: Optional[SpeechSynthesizer] = None

        if synthesizer is None:
            self.supported = False
            self.error = NOT_SUPPORTED_MESSAGE
            logger.warning("Speech synthesis unavailable: no synthesizer on this platform")
            return

        self._synth = synthesizer
        self.supported = True
        self._listeners = {
            "start": self._on_synth_start,
            "end": self._on_synth_end,
            "pause": self._on_synth_pause,
            "resume": self._on_synth_resume,
            "error": self._on_synth_error,
            "voiceschanged": self.populate_voices,
        }
        for event, handler in self._listeners.items():
            try:
                self._synth.add_listener(event, handler)
            except Exception as e:
                logger.error(f"Could not listen for synthesizer '{event}' events: {e}")

        self.populate_voices()

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    @property
    def is_paused(self) -> bool:
        return self._paused

    # ─── Voices ──────────────────────────────────────────────────────────────

    def populate_voices(self) -> None:
        """Re-read the platform voice list. Picks a default voice the first time."""
        if not self.supported:
            return
        try:
            available = list(self._synth.get_voices())
        except Exception as e:
            logger.error(f"Error getting voices: {e}")
            self.error = "Error getting voices"
            self._notify()
            return

        self.voices = sort_voices(available)

        if self.current_voice is None and self.voices:
            # Prefer a local English voice as the default
            self.current_voice = next(
                (v for v in self.voices if base_language(v.lang) == "en" and v.local_service),
                self.voices[0],
            )
            logger.info(f"Default voice: {self.current_voice.name} ({self.current_voice.lang})")

        logger.debug(f"Voices loaded: {len(self.voices)}")
        self._notify()

    def set_voice(self, voice: Optional[Voice]) -> None:
        self.current_voice = voice
        self._notify()

    def has_voice_for(self, language_tag: str) -> bool:
        """True when some voice matches the tag exactly or by base language."""
        base = base_language(language_tag)
        return any(base_language(v.lang) == base for v in self.voices)

    def _select_voice(self, language_tag: str, preferred: Optional[Voice]) -> Optional[Voice]:
        if preferred is not None:
            logger.info(f"Using preferred voice: {preferred.name} ({preferred.lang})")
            return preferred

        if self.current_voice and base_language(self.current_voice.lang) == base_language(language_tag):
            logger.info(f"Using current voice: {self.current_voice.name} ({self.current_voice.lang})")
            return self.current_voice

        voice = get_best_voice_for_language(self.voices, language_tag)
        if voice:
            logger.info(f"Found voice for {language_tag}: {voice.name} ({voice.lang})")
        else:
            logger.warning(f"No voice found for language {language_tag}, falling back to platform default")
        return voice

    # ─── Commands ────────────────────────────────────────────────────────────

    def speak(
        self,
        text: str,
        language_tag: str = DEFAULT_LANGUAGE_TAG,
        rate: float = 1.0,
        pitch: float = 1.0,
        options: Optional[SpeakOptions] = None,
    ) -> Future:
        """
        Speak `text`, cancelling whatever is playing.

        Returns a future resolving to a SpeechOutcome on the utterance's
        end or error, or when a later speak()/cancel() supersedes it.
        """
        options = options or SpeakOptions()

        if not self.supported:
            self.error = NOT_SUPPORTED_MESSAGE
            _call(options.on_error, NOT_SUPPORTED_MESSAGE)
            return _resolved(SpeechOutcome(False, NOT_SUPPORTED_MESSAGE))

        future: Future = Future()
        try:
            self._supersede()

            cleaned = text if options.emphasize_words else clean_pronunciation(text)
            voice = self._select_voice(language_tag, options.preferred_voice)

            utterance = Utterance(
                text=cleaned,
                lang=language_tag,
                voice=voice,
                rate=_clamp(rate, SPEECH_RATE_RANGE),
                pitch=_clamp(pitch, SPEECH_PITCH_RANGE),
            )
            fired: set = set()
            utterance.on_start = lambda: self._utterance_started(utterance, options, fired)
            utterance.on_end = lambda: self._utterance_ended(utterance, options, fired)
            utterance.on_error = lambda code: self._utterance_failed(utterance, options, fired, code)

            logger.info(
                f"Speaking: lang={utterance.lang}, voice={voice.name if voice else 'default'}, "
                f"rate={utterance.rate}, text='{cleaned[:30]}'"
            )

            # State first: some platforms call back synchronously from speak()
            self._utterance = utterance
            self._pending = future
            self._speaking = True
            self._paused = False
            self.error = None
            self._synth.speak(utterance)
        except Exception as e:
            message = "Error speaking"
            logger.error(f"{message}: {e}")
            self.error = message
            self._speaking = False
            self._paused = False
            self._utterance = None
            self._pending = None
            self._resolve(future, SpeechOutcome(False, message))
            _call(options.on_error, message)

        self._notify()
        return future

    def cancel(self) -> None:
        """Stop speech. Safe to call when nothing is playing."""
        if not self.supported:
            return
        self._release(SpeechOutcome(False, CANCELED))
        try:
            self._synth.cancel()
        except Exception as e:
            logger.error(f"Error canceling speech: {e}")
            self.error = "Error canceling speech"
        self._speaking = False
        self._paused = False
        self._notify()

    def pause(self) -> None:
        if not self.supported or not self._speaking:
            return
        try:
            self._synth.pause()
            self._paused = True
        except Exception as e:
            logger.error(f"Error pausing speech: {e}")
            self.error = "Error pausing speech"
        self._notify()

    def resume(self) -> None:
        if not self.supported or not self._paused:
            return
        try:
            self._synth.resume()
            self._paused = False
        except Exception as e:
            logger.error(f"Error resuming speech: {e}")
            self.error = "Error resuming speech"
        self._notify()

    def close(self) -> None:
        """Detach from the synthesizer and cancel any speech."""
        if not self.supported:
            return
        for event, handler in self._listeners.items():
            try:
                self._synth.remove_listener(event, handler)
            except Exception as e:
                logger.error(f"Could not remove synthesizer '{event}' listener: {e}")
        self.cancel()

    # ─── Internals ───────────────────────────────────────────────────────────

    def _supersede(self) -> None:
        self._release(SpeechOutcome(False, CANCELED))
        self._synth.cancel()

    def _release(self, outcome: SpeechOutcome) -> None:
        future, self._pending = self._pending, None
        self._utterance = None
        self._resolve(future, outcome)

    @staticmethod
    def _resolve(future: Optional[Future], outcome: SpeechOutcome) -> None:
        if future is not None and not future.done():
            future.set_result(outcome)

    # Per-utterance events. A superseded or cancelled utterance is no longer
    # current: its future already resolved as canceled and its callbacks stay quiet.

    def _utterance_started(self, utterance: Utterance, options: SpeakOptions, fired: set) -> None:
        if utterance is not self._utterance or "start" in fired:
            return
        fired.add("start")
        self._speaking = True
        self._notify()
        _call(options.on_start)

    def _utterance_ended(self, utterance: Utterance, options: SpeakOptions, fired: set) -> None:
        if utterance is not self._utterance or fired & {"end", "error"}:
            return
        fired.add("end")
        self._speaking = False
        self._paused = False
        self._release(SpeechOutcome(True, voice=utterance.voice))
        self._notify()
        _call(options.on_end)

    def _utterance_failed(self, utterance: Utterance, options: SpeakOptions, fired: set, code: str) -> None:
        if utterance is not self._utterance or fired & {"end", "error"}:
            return
        fired.add("error")
        message = f"Speech error: {code}"
        self._speaking = False
        self._paused = False
        self._release(SpeechOutcome(False, message, utterance.voice))
        self._notify()
        _call(options.on_error, message)

    # Synthesizer-wide events

    def _on_synth_start(self, *_args) -> None:
        self._speaking = True
        self._notify()

    def _on_synth_end(self, *_args) -> None:
        self._speaking = False
        self._paused = False
        self._notify()

    def _on_synth_pause(self, *_args) -> None:
        self._paused = True
        self._notify()

    def _on_synth_resume(self, *_args) -> None:
        self._paused = False
        self._notify()

    def _on_synth_error(self, code: str = "unknown", *_args) -> None:
        self.error = f"Speech synthesis error: {code}"
        self._speaking = False
        self._paused = False
        self._notify()


def _call(callback: Optional[Callable], *args) -> None:
    """Invoke a caller-supplied callback. Errors are logged, never raised into the platform."""
    if callback is None:
        return
    try:
        callback(*args)
    except Exception as e:
        logger.error(f"Speech callback {callback!r} failed: {e}")
