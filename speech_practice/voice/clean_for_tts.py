"""
Speech Practice v1.0 — TTS Text Cleaner
Strips pronunciation-guide markup that should not be read aloud.

Pure function, stdlib only.
"""

import re


# ─── Markup ──────────────────────────────────────────────────────────────────

# Phonemic slashes and phonetic brackets: /ˈola/, [ˈola]
_DELIMITERS = re.compile(r"[/\[\]]")

# IPA primary (ˈ) and secondary (ˌ) stress marks
_STRESS_MARKS = re.compile(r"[ˈˌ]")


def clean_pronunciation(text: str) -> str:
    """
    Clean a phrase or pronunciation guide for speech synthesis.

    Examples:
        "/ˈola/" → "ola"
        "[ɡɾaˈθjas]" → "ɡɾaθjas"
        "  buenos  días " → "buenos días"
    """
    if not text:
        return ""

    result = _DELIMITERS.sub("", text)
    result = _STRESS_MARKS.sub("", result)

    # ─── Clean up multiple spaces ────────────────────────────────────────
    result = re.sub(r"\s+", " ", result).strip()

    return result
