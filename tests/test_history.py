"""
Tests for session history persistence: wire format, corrupt data, and the
SQLAlchemy-backed store (in-memory SQLite).
"""

import json
from datetime import datetime, timezone

import pytest

from speech_practice.config import HISTORY_STORAGE_KEY
from speech_practice.database import init_db, make_engine, make_session_factory
from speech_practice.practice.engine import PracticeSessionEngine
from speech_practice.practice.history import SessionHistoryRepository
from speech_practice.practice.models import PracticeResult, PracticeSession
from speech_practice.storage import MemoryStore, SqlKeyValueStore

from conftest import FixedClock, make_phrases


def _session(language="spanish", accuracies=(100, 50), session_id=None):
    phrases = make_phrases(*[f"palabra{i}" for i in range(len(accuracies))], language=language)
    session = PracticeSession(
        language=language,
        start_time=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        phrases=phrases,
    )
    if session_id:
        session.id = session_id
    for phrase, accuracy in zip(phrases, accuracies):
        session.upsert_result(PracticeResult(phrase_id=phrase.id, accuracy=accuracy, user_transcript=phrase.phrase))
    session.end_time = datetime(2024, 3, 1, 9, 5, tzinfo=timezone.utc)
    session.completed = True
    return session


class FailingStore:
    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")


class FlakyStore(MemoryStore):
    """Raises on the first `failures` reads (a locked database), then recovers."""

    def __init__(self, initial=None, failures=1):
        super().__init__(initial)
        self.failures = failures
        self.writes = 0

    def get(self, key):
        if self.failures:
            self.failures -= 1
            raise OSError("database is locked")
        return super().get(key)

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


def _seeded(count):
    sessions = [_session(session_id=f"session_old{i}") for i in range(count)]
    return {HISTORY_STORAGE_KEY: json.dumps([s.to_record() for s in sessions])}


# ─── Wire format ─────────────────────────────────────────────────────────────

class TestWireFormat:
    def test_camel_case_keys(self, store, history):
        history.append(_session())
        record = json.loads(store.get(HISTORY_STORAGE_KEY))[0]

        assert set(record) >= {"id", "language", "startTime", "endTime", "phrases", "results", "completed", "score"}
        assert record["results"][0].keys() >= {"phraseId", "accuracy", "userTranscript", "timestamp"}
        assert record["score"] == 75
        assert record["startTime"].startswith("2024-03-01T09:00:00")

    def test_round_trip(self, store, history):
        original = _session(accuracies=(80, 60, 100))
        history.append(original)

        reloaded = SessionHistoryRepository(store).sessions[0]
        assert reloaded.id == original.id
        assert reloaded.results == original.results
        assert reloaded.phrases == original.phrases
        assert reloaded.score == 80
        assert reloaded.end_time == original.end_time

    def test_snake_case_accepted(self):
        data = [{
            "id": "session_legacy",
            "language": "french",
            "start_time": "2024-01-01T10:00:00+00:00",
            "phrases": [{"id": "p1", "phrase": "Bonjour"}],
            "results": [{"phrase_id": "p1", "accuracy": 40, "timestamp": "2024-01-01T10:01:00+00:00"}],
            "completed": True,
        }]
        history = SessionHistoryRepository(MemoryStore({HISTORY_STORAGE_KEY: json.dumps(data)}))
        assert history.sessions[0].score == 40


# ─── Load / append ───────────────────────────────────────────────────────────

class TestRepository:
    def test_empty_store(self, history):
        assert history.load() == []

    def test_append_persists_whole_log(self, store, history):
        history.append(_session(session_id="session_a"))
        history.append(_session(session_id="session_b"))
        stored = json.loads(store.get(HISTORY_STORAGE_KEY))
        assert [s["id"] for s in stored] == ["session_a", "session_b"]

    def test_append_takes_a_copy(self, history):
        session = _session()
        history.append(session)
        session.results.clear()
        assert len(history.sessions[0].results) == 2

    def test_load_reads_store_once(self, store, history):
        history.load()
        store.set(HISTORY_STORAGE_KEY, json.dumps([_session().to_record()]))
        assert history.load() == []

    def test_recent_newest_first(self, history):
        for name in ("a", "b", "c"):
            history.append(_session(session_id=f"session_{name}"))
        assert [s.id for s in history.recent(2)] == ["session_c", "session_b"]

    def test_average_score(self, history):
        history.append(_session(accuracies=(100,)))
        history.append(_session(accuracies=(50,)))
        history.append(_session(language="french", accuracies=(0,)))
        assert history.average_score("spanish") == 75
        assert history.average_score("Spanish") == 75
        assert history.average_score() == 50
        assert history.average_score("german") == 0

    def test_clear(self, store, history):
        history.append(_session())
        history.clear()
        assert history.sessions == []
        assert json.loads(store.get(HISTORY_STORAGE_KEY)) == []

    def test_custom_key(self, store):
        history = SessionHistoryRepository(store, key="other-history")
        history.append(_session())
        assert store.get(HISTORY_STORAGE_KEY) is None
        assert store.get("other-history") is not None


# ─── Corrupt / failing storage ───────────────────────────────────────────────

class TestCorruptHistory:
    @pytest.mark.parametrize("raw", [
        "{not json",
        '{"id": "not a list"}',
        '[{"id": "session_x"}]',
        '[{"language": "spanish", "startTime": "2024-01-01T00:00:00Z", "phrases": []}]',
    ])
    def test_unreadable_history_is_empty(self, raw):
        history = SessionHistoryRepository(MemoryStore({HISTORY_STORAGE_KEY: raw}))
        assert history.load() == []

    def test_append_after_corrupt_overwrites(self):
        store = MemoryStore({HISTORY_STORAGE_KEY: "garbage"})
        history = SessionHistoryRepository(store)
        history.append(_session())
        assert len(json.loads(store.get(HISTORY_STORAGE_KEY))) == 1

    def test_store_read_failure(self):
        history = SessionHistoryRepository(FailingStore())
        assert history.load() == []

    def test_store_write_failure_keeps_memory_copy(self):
        store = FlakyStore(failures=0)
        store.set = FailingStore().set
        history = SessionHistoryRepository(store)
        history.append(_session())
        assert len(history.sessions) == 1


class TestUnreadableStore:
    def test_failed_first_read_keeps_existing_history(self):
        """A completed session after a failed startup read is added, not written over the log."""
        store = FlakyStore(_seeded(3), failures=1)
        engine = PracticeSessionEngine(SessionHistoryRepository(store), clock=FixedClock())

        engine.start_session("spanish", make_phrases("Hola"))
        engine.record_result("p1", 100, "hola")
        engine.end_session()

        stored = json.loads(store.get(HISTORY_STORAGE_KEY))
        assert len(stored) == 4
        assert [s["id"] for s in stored[:3]] == ["session_old0", "session_old1", "session_old2"]

    def test_no_write_while_unreadable(self):
        store = FlakyStore(_seeded(2), failures=10)
        history = SessionHistoryRepository(store)
        history.append(_session(session_id="session_new"))

        assert store.writes == 0
        assert [s.id for s in history.sessions] == ["session_new"]

    def test_unsaved_sessions_written_once_readable(self):
        store = FlakyStore(_seeded(2), failures=2)
        history = SessionHistoryRepository(store)
        history.load()
        history.append(_session(session_id="session_a"))
        assert store.writes == 0

        history.append(_session(session_id="session_b"))

        stored = [s["id"] for s in json.loads(store.get(HISTORY_STORAGE_KEY))]
        assert stored == ["session_old0", "session_old1", "session_a", "session_b"]
        assert [s.id for s in history.sessions] == stored

    def test_corrupt_data_still_replaced(self):
        """Unparseable data is not a read failure: the next append starts a fresh log."""
        store = FlakyStore({HISTORY_STORAGE_KEY: "garbage"}, failures=0)
        history = SessionHistoryRepository(store)
        history.append(_session())
        assert store.writes == 1


# ─── SQL store ───────────────────────────────────────────────────────────────

@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://")
    init_db(engine)
    return SqlKeyValueStore(make_session_factory(engine))


class TestSqlStore:
    def test_missing_key(self, sql_store):
        assert sql_store.get("nothing-here") is None

    def test_insert_then_update(self, sql_store):
        sql_store.set("k", "one")
        sql_store.set("k", "two")
        assert sql_store.get("k") == "two"

    def test_history_over_sql(self, sql_store):
        SessionHistoryRepository(sql_store).append(_session(session_id="session_sql"))
        reloaded = SessionHistoryRepository(sql_store)
        assert [s.id for s in reloaded.sessions] == ["session_sql"]

    def test_init_db_idempotent(self):
        engine = make_engine("sqlite://")
        init_db(engine)
        init_db(engine)
        store = SqlKeyValueStore(make_session_factory(engine))
        store.set("k", "v")
        assert store.get("k") == "v"
