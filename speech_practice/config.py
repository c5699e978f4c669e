"""
Speech Practice v1.0 — Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Load .env from the working directory or its parents (real environment variables win)
load_dotenv(find_dotenv(usecwd=True), override=False)


# ─── Paths ───────────────────────────────────────────────────────────────────

def resolve_data_dir(value: Optional[str] = None) -> Path:
    """Where local files (the SQLite history) live. Defaults to the working directory."""
    if value:
        return Path(value).expanduser()
    return Path.cwd()


DATA_DIR = resolve_data_dir(os.getenv("SPEECH_PRACTICE_DATA_DIR"))


# ─── Persistence ─────────────────────────────────────────────────────────────

def normalize_database_url(url: str) -> str:
    # Hosted Postgres often hands out "postgres://", which SQLAlchemy rejects
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


DATABASE_URL = normalize_database_url(os.getenv(
    "DATABASE_URL",
    f"sqlite:///{DATA_DIR / 'speech_practice.db'}"
))

HISTORY_STORAGE_KEY = "practice-session-history"

# ─── Languages ───────────────────────────────────────────────────────────────
DEFAULT_LANGUAGE_TAG = os.getenv("DEFAULT_LANGUAGE_TAG", "en-US")

# Human-readable language name → BCP-47 tag used by the speech capabilities
LANGUAGE_CODES = {
    "english": "en-US",
    "spanish": "es-ES",
    "french": "fr-FR",
    "german": "de-DE",
    "italian": "it-IT",
    "portuguese": "pt-PT",
    "japanese": "ja-JP",
    "mandarin": "zh-CN",
    "arabic": "ar-SA",
}

# ─── Speech Recognition ──────────────────────────────────────────────────────
# Restart delay after the platform reports "recognizer already running"
RECOGNITION_RESTART_DELAY_SECONDS = float(os.getenv("RECOGNITION_RESTART_DELAY_SECONDS", "0.2"))
# Delay before a network failure flips to "reconnecting" and the recognizer is aborted
NETWORK_RETRY_DELAY_SECONDS = float(os.getenv("NETWORK_RETRY_DELAY_SECONDS", "2.0"))

# ─── Speech Synthesis ────────────────────────────────────────────────────────
SPEECH_RATE_RANGE = (0.1, 10.0)
SPEECH_PITCH_RANGE = (0.0, 2.0)
# Reference phrases are played a little slower than normal speech
PLAYBACK_RATE = float(os.getenv("PLAYBACK_RATE", "0.8"))

# ─── Practice Sessions ───────────────────────────────────────────────────────
VOCABULARY_SESSION_SIZE = int(os.getenv("VOCABULARY_SESSION_SIZE", "10"))

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging for a host process (console, tests, embedding app)."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
