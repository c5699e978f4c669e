"""
Speech Practice v1.0

Pronunciation practice: hear a phrase, say it back, get a word-overlap score.
Platform speech engines are injected; see speech_practice.voice.platform.
"""

__version__ = "1.0.0"
