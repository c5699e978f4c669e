"""
Speech Practice v1.0 — Vocabulary → Practice Phrases
Picks which saved words to drill and turns them into phrases.
"""

from speech_practice.practice.models import Difficulty, PracticePhrase


def select_practice_words(words: list, count: int) -> list:
    """
    Up to `count` words, not-yet-mastered first.

    Mastered words only pad the selection when too few unmastered remain.
    Original order is kept within each group.
    """
    unmastered = [w for w in words if not w.mastered]
    if len(unmastered) >= count:
        return unmastered[:count]
    mastered = [w for w in words if w.mastered]
    return (unmastered + mastered)[:count]


def words_to_phrases(words: list) -> list:
    return [
        PracticePhrase(
            id=word.id,
            phrase=word.word,
            translation=word.translation,
            pronunciation=word.pronunciation,
            difficulty=Difficulty.INTERMEDIATE,
            category=word.category or "Vocabulary",
            language=word.language,
        )
        for word in words
    ]
