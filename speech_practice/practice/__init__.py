"""
Speech Practice v1.0 — Practice Package

Scoring, session state machine, history and the coach that ties them to the
voice adapters.
"""
from speech_practice.practice.engine import PracticeSessionEngine
from speech_practice.practice.models import PracticePhrase, PracticeResult, PracticeSession, VocabularyWord
from speech_practice.practice.scorer import calculate_pronunciation_accuracy, score_attempt

__all__ = [
    "PracticeSessionEngine",
    "PracticePhrase", "PracticeResult", "PracticeSession", "VocabularyWord",
    "calculate_pronunciation_accuracy", "score_attempt",
]
