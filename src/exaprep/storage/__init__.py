"""Storage package: exam history stores and helpers."""
from . import history as _history

# Re-export commonly used names
HistoryStore = _history.HistoryStore
MemoryHistoryStore = _history.MemoryHistoryStore
SQLiteHistoryStore = _history.SQLiteHistoryStore
remember = _history.remember
