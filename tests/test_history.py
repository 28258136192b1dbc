import json
import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from exaprep.models import Exam, Question, QuestionType
from exaprep.storage import MemoryHistoryStore, SQLiteHistoryStore, remember

from conftest import ALGEBRA_QUESTION


def _exam(i: int) -> Exam:
    return Exam(
        id=f"exam_{i}",
        title=f"Exam {i}",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=i),
        questions=(
            Question.model_validate(ALGEBRA_QUESTION),
            Question(
                question_number=2,
                question_text="Explain commutativity.",
                question_type=QuestionType.ESSAY,
                correct_answer="a+b = b+a for all a, b.",
            ),
        ),
    )


@pytest.fixture(params=["sqlite", "memory"])
def store(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteHistoryStore(db_path=str(tmp_path / "history.db"))
    return MemoryHistoryStore()


def test_empty_store_loads_nothing(store):
    assert store.load() == []


@pytest.mark.parametrize("n", [1, 3, 10])
def test_round_trip_preserves_order(store, n):
    exams = [_exam(i) for i in range(n, 0, -1)]
    store.save(exams)
    assert store.load() == exams


def test_saving_eleven_keeps_ten_most_recent(store):
    exams = [_exam(i) for i in range(11, 0, -1)]  # newest first
    store.save(exams)
    loaded = store.load()
    assert len(loaded) == 10
    assert [e.id for e in loaded] == [f"exam_{i}" for i in range(11, 1, -1)]


def test_save_overwrites(store):
    store.save([_exam(1), _exam(2)])
    store.save([_exam(3)])
    assert [e.id for e in store.load()] == ["exam_3"]


def test_remember_prepends_and_evicts_oldest(store):
    for i in range(1, 13):
        remember(store, _exam(i))
    assert [e.id for e in store.load()] == [f"exam_{i}" for i in range(12, 2, -1)]


def test_remember_does_not_duplicate(store):
    remember(store, _exam(1))
    remember(store, _exam(2))
    remember(store, _exam(1))
    assert [e.id for e in store.load()] == ["exam_1", "exam_2"]


def test_sqlite_survives_new_instance(tmp_path):
    path = str(tmp_path / "h.db")
    SQLiteHistoryStore(db_path=path).save([_exam(1)])
    assert SQLiteHistoryStore(db_path=path).load() == [_exam(1)]


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"id": "exam_1"}),
        json.dumps([{"id": "exam_1", "title": "T"}]),
    ],
)
def test_corrupt_history_is_discarded_wholesale(tmp_path, raw):
    path = str(tmp_path / "h.db")
    store = SQLiteHistoryStore(db_path=path)
    store.save([_exam(1)])
    with sqlite3.connect(path) as cx:
        cx.execute("UPDATE exam_history SET history_json = ?", (raw,))

    assert store.load() == []
    # the bad row is gone, so the next save starts clean
    store.save([_exam(2)])
    assert [e.id for e in store.load()] == ["exam_2"]


def test_custom_limit(tmp_path):
    store = SQLiteHistoryStore(db_path=str(tmp_path / "h.db"), limit=3)
    store.save([_exam(i) for i in range(5, 0, -1)])
    assert [e.id for e in store.load()] == ["exam_5", "exam_4", "exam_3"]


def test_sqlite_store_closes_its_connections(tmp_path, monkeypatch):
    from exaprep.storage import history as history_module

    opened = []
    real_connect = sqlite3.connect

    def tracking_connect(*args, **kwargs):
        cx = real_connect(*args, **kwargs)
        opened.append(cx)
        return cx

    monkeypatch.setattr(history_module.sqlite3, "connect", tracking_connect)
    store = SQLiteHistoryStore(db_path=str(tmp_path / "history.db"))
    store.save([_exam(1)])
    assert [e.id for e in store.load()] == ["exam_1"]
    store.clear()

    assert len(opened) == 4
    for cx in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            cx.execute("SELECT 1")
