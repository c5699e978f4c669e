"""
Speech Practice v1.0 — Default Practice Phrases
Used when the learner brings no phrases of their own. Languages without a
translated set fall back to English.
"""

from speech_practice.practice.models import Difficulty, PracticePhrase
from speech_practice.voice.languages import get_language_code

ENGLISH_PHRASES = [
    "Hello, how are you?",
    "My name is...",
    "I would like to learn more",
    "Could you speak more slowly?",
    "Thank you very much",
]

# BCP-47 tag → phrases, index-aligned with ENGLISH_PHRASES
TRANSLATED_PHRASES = {
    "es-ES": [
        "Hola, ¿cómo estás?",
        "Me llamo...",
        "Me gustaría aprender más",
        "¿Podría hablar más despacio?",
        "Muchas gracias",
    ],
    "fr-FR": [
        "Bonjour, comment allez-vous?",
        "Je m'appelle...",
        "Je voudrais apprendre davantage",
        "Pourriez-vous parler plus lentement?",
        "Merci beaucoup",
    ],
    "de-DE": [
        "Hallo, wie geht es Ihnen?",
        "Ich heiße...",
        "Ich möchte mehr lernen",
        "Könnten Sie langsamer sprechen?",
        "Vielen Dank",
    ],
}


def default_phrases(language: str) -> list:
    phrases = TRANSLATED_PHRASES.get(get_language_code(language), ENGLISH_PHRASES)
    return [
        PracticePhrase(
            id=f"default_phrase_{i}",
            phrase=phrase,
            translation=ENGLISH_PHRASES[i],
            difficulty=Difficulty.BEGINNER,
            category="Basic Phrases",
            language=language,
        )
        for i, phrase in enumerate(phrases)
    ]


def phrases_from_text(language: str, texts: list) -> list:
    """Ad-hoc phrases typed by the learner, e.g. on the command line."""
    return [
        PracticePhrase(id=f"phrase_{i}", phrase=text, language=language)
        for i, text in enumerate(texts)
        if text.strip()
    ]
