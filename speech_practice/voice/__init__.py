"""
Speech Practice v1.0 — Voice Package

Adapters over the host's speech recognition and synthesis capabilities.
"""
from speech_practice.voice.recognition import RecognitionOutcome, SpeechInputAdapter
from speech_practice.voice.synthesis import SpeakOptions, SpeechOutcome, SpeechOutputAdapter

__all__ = [
    "RecognitionOutcome", "SpeechInputAdapter",
    "SpeakOptions", "SpeechOutcome", "SpeechOutputAdapter",
]
