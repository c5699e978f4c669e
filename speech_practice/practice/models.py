"""
Speech Practice v1.0 — Practice Data Model

PracticePhrase:  one reference phrase. Frozen once created.
PracticeResult:  one scored attempt at a phrase.
PracticeSession: ordered phrases + per-phrase results + derived score.
VocabularyWord:  a saved word that can seed a practice session.

Wire format (history storage): camelCase keys, ISO-8601 datetimes.
`session.model_dump(mode="json", by_alias=True)` ↔ `PracticeSession.model_validate(data)`.
"""

import math
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _session_id() -> str:
    return f"session_{uuid.uuid4().hex[:12]}"


def round_half_up(value: float) -> int:
    """2.5 → 3, not Python's banker's 2."""
    return int(math.floor(value + 0.5))


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PracticePhrase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    phrase: str
    translation: Optional[str] = None
    pronunciation: Optional[str] = None  # guide such as "/ˈola/"
    difficulty: Difficulty = Difficulty.BEGINNER
    category: str = "General"
    language: str = "english"  # language name, see config.LANGUAGE_CODES


class PracticeResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    phrase_id: str
    accuracy: int = Field(ge=0, le=100)
    user_transcript: str = ""
    timestamp: datetime = Field(default_factory=_now)


class PracticeSession(BaseModel):
    """
    One practice run. Results are keyed by phrase_id: a retry replaces the
    earlier result in place, so list order is first-attempt order.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=_session_id)
    language: str
    start_time: datetime = Field(default_factory=_now)
    end_time: Optional[datetime] = None
    phrases: list[PracticePhrase] = Field(min_length=1)
    results: list[PracticeResult] = Field(default_factory=list)
    completed: bool = False

    @computed_field
    @property
    def score(self) -> int:
        """Mean accuracy over recorded results, 0 when there are none."""
        if not self.results:
            return 0
        return round_half_up(sum(r.accuracy for r in self.results) / len(self.results))

    def result_for(self, phrase_id: str) -> Optional[PracticeResult]:
        return next((r for r in self.results if r.phrase_id == phrase_id), None)

    def has_phrase(self, phrase_id: str) -> bool:
        return any(p.id == phrase_id for p in self.phrases)

    def upsert_result(self, result: PracticeResult) -> None:
        for i, existing in enumerate(self.results):
            if existing.phrase_id == result.phrase_id:
                self.results[i] = result
                return
        self.results.append(result)

    def to_record(self) -> dict:
        """JSON-ready dict in the history wire format."""
        return self.model_dump(mode="json", by_alias=True)


class VocabularyWord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    word: str
    translation: str = ""
    category: Optional[str] = None
    pronunciation: Optional[str] = None
    mastered: bool = False
    favorite: bool = False
    language: str = "english"
    date_added: datetime = Field(default_factory=_now)
    last_practiced: Optional[datetime] = None
