"""
Exam history storage.
- load() -> List[Exam], newest first (empty when nothing is stored)
- save(exams) overwrites; keeps at most `limit` entries in the given order

Corrupt stored data is dropped wholesale, never partially recovered.
"""
from __future__ import annotations
import json, logging, sqlite3
from contextlib import closing
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from exaprep.configuration import settings
from exaprep.models import Exam

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS exam_history (
  slot TEXT PRIMARY KEY,
  history_json TEXT NOT NULL,
  updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

_SLOT = "examHistory"


class HistoryStore(ABC):
    def __init__(self, limit: Optional[int] = None):
        self.limit = limit if limit is not None else settings.history_limit

    @abstractmethod
    def load(self) -> List[Exam]:
        pass

    @abstractmethod
    def save(self, exams: Sequence[Exam]) -> None:
        pass


class MemoryHistoryStore(HistoryStore):
    """Process-local store; used by tests and when no database is wanted."""

    def __init__(self, limit: Optional[int] = None):
        super().__init__(limit)
        self._exams: List[Exam] = []

    def load(self) -> List[Exam]:
        return list(self._exams)

    def save(self, exams: Sequence[Exam]) -> None:
        self._exams = list(exams)[: self.limit]


class SQLiteHistoryStore(HistoryStore):
    """History kept as one JSON row in a SQLite file."""

    def __init__(self, db_path: Optional[str] = None, limit: Optional[int] = None):
        super().__init__(limit)
        self.db_path = db_path or settings.history_db
        self.init()

    def _connect(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        cx = sqlite3.connect(self.db_path, check_same_thread=False)
        cx.row_factory = sqlite3.Row
        return cx

    def init(self) -> None:
        with closing(self._connect()) as cx, cx:
            cx.executescript(_SCHEMA)

    def load(self) -> List[Exam]:
        with closing(self._connect()) as cx, cx:
            row = cx.execute("SELECT history_json FROM exam_history WHERE slot = ?", (_SLOT,)).fetchone()
        if not row:
            return []
        try:
            items = json.loads(row["history_json"])
            if not isinstance(items, list):
                raise ValueError("history is not a list")
            return [Exam.model_validate(it) for it in items]
        except (ValueError, ValidationError) as exc:
            logger.warning("Discarding corrupt exam history in %s: %s", self.db_path, exc)
            self.clear()
            return []

    def save(self, exams: Sequence[Exam]) -> None:
        payload = json.dumps([e.to_dict() for e in list(exams)[: self.limit]], ensure_ascii=False)
        with closing(self._connect()) as cx, cx:
            cx.execute(
                """
                INSERT INTO exam_history(slot, history_json)
                VALUES (?, ?)
                ON CONFLICT(slot) DO UPDATE SET
                  history_json=excluded.history_json,
                  updated_at=CURRENT_TIMESTAMP
                """,
                (_SLOT, payload),
            )

    def clear(self) -> None:
        with closing(self._connect()) as cx, cx:
            cx.execute("DELETE FROM exam_history WHERE slot = ?", (_SLOT,))


def remember(store: HistoryStore, exam: Exam) -> List[Exam]:
    """Put `exam` at the front of the history and persist the capped list."""
    history = [exam] + [e for e in store.load() if e.id != exam.id]
    history = history[: store.limit]
    store.save(history)
    return history
