"""
Speech Practice v1.0 — Language Tags
Maps human-readable language names to the BCP-47 tags the speech
capabilities expect.
"""

from speech_practice.config import LANGUAGE_CODES, DEFAULT_LANGUAGE_TAG


def get_language_code(language: str) -> str:
    """
    Get the BCP-47 tag for a language name. Unknown names fall back to en-US.

    Examples:
        "Spanish" → "es-ES"
        "klingon" → "en-US"
    """
    if not language:
        return DEFAULT_LANGUAGE_TAG
    return LANGUAGE_CODES.get(language.strip().lower(), DEFAULT_LANGUAGE_TAG)


def normalize_tag(tag: str) -> str:
    """Compare-friendly form of a language tag: "es_es" → "es-es"."""
    return (tag or "").replace("_", "-").lower()


def base_language(tag: str) -> str:
    """Primary subtag: "es-ES" → "es"."""
    return normalize_tag(tag).split("-")[0]
