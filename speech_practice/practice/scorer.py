"""
Speech Practice v1.0 — Pronunciation Scorer
DETERMINISTIC PYTHON. No audio, no I/O, no adapters.

Word-overlap heuristic, deliberately coarse so beginners get credit:
  1. lowercase + trim both strings
  2. split on whitespace
  3. count reference words that appear anywhere in the transcript
  4. accuracy = round(100 * matches / max(len(reference), len(transcript)))

Two empty strings score 100. One-sided emptiness scores 0.
"""

from dataclasses import dataclass
from enum import Enum

from speech_practice.practice.models import round_half_up


class FeedbackTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_PRACTICE = "needs more practice"


# Lowest accuracy for each tier, checked top-down
TIER_THRESHOLDS = (
    (90, FeedbackTier.EXCELLENT),
    (70, FeedbackTier.GOOD),
    (50, FeedbackTier.FAIR),
)

FEEDBACK_MESSAGES = {
    FeedbackTier.EXCELLENT: "Excellent! Your pronunciation is spot on!",
    FeedbackTier.GOOD: "Good job! Keep practicing to perfect your pronunciation.",
    FeedbackTier.FAIR: "Not bad, but there's room for improvement.",
    FeedbackTier.NEEDS_PRACTICE: "Let's keep practicing. Listen to the example and try again.",
}


@dataclass(frozen=True)
class PronunciationFeedback:
    """Scored attempt."""
    accuracy: int  # 0-100
    tier: FeedbackTier
    message: str


def _words(text: str) -> list:
    return (text or "").lower().split()


def calculate_pronunciation_accuracy(reference: str, transcript: str) -> int:
    """
    Score a transcript against the reference phrase, 0-100.

    Examples:
        ("Hola Mundo", "hola   mundo") → 100
        ("hello world", "") → 0
        ("Gracias", "gracias amigo") → 50
    """
    reference_words = _words(reference)
    transcript_words = _words(transcript)

    longest = max(len(reference_words), len(transcript_words))
    if longest == 0:
        return 100

    heard = set(transcript_words)
    matches = sum(1 for word in reference_words if word in heard)

    return max(0, min(100, round_half_up(100 * matches / longest)))


def feedback_tier(accuracy: int) -> FeedbackTier:
    for threshold, tier in TIER_THRESHOLDS:
        if accuracy >= threshold:
            return tier
    return FeedbackTier.NEEDS_PRACTICE


def generate_pronunciation_feedback(accuracy: int) -> str:
    return FEEDBACK_MESSAGES[feedback_tier(accuracy)]


def score_attempt(reference: str, transcript: str) -> PronunciationFeedback:
    """Accuracy, tier and encouragement for one attempt."""
    accuracy = calculate_pronunciation_accuracy(reference, transcript)
    tier = feedback_tier(accuracy)
    return PronunciationFeedback(accuracy=accuracy, tier=tier, message=FEEDBACK_MESSAGES[tier])
