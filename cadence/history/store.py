"""
Tool: History Store
Purpose: Read contract over a user's history plus two adapters

The engine only ever reads history. Reads take inclusive timestamp bounds
and return an empty list (never an error) when nothing falls inside.

Usage:
    from cadence.history.store import InMemoryHistoryStore, SQLiteHistoryStore, load_snapshot

    store = SQLiteHistoryStore(user_id="alice")
    await store.record_completion(record)
    snapshot = await load_snapshot(store, start, end)

Dependencies:
    - sqlite3 (stdlib)
"""

import asyncio
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from cadence.history import get_connection
from cadence.history.models import (
    CompletionRecord,
    EnergyEntry,
    FocusSessionRecord,
    HistorySnapshot,
    MoodEntry,
    ingest_rows,
)
from cadence.logging_config import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class HistoryStore(ABC):
    """
    Read contract the engine depends on.

    Bounds are inclusive. An empty or inverted range returns an empty list.
    """

    @abstractmethod
    async def get_completions(self, start: datetime, end: datetime) -> list[CompletionRecord]:
        pass

    @abstractmethod
    async def get_energy_logs(self, start: datetime, end: datetime) -> list[EnergyEntry]:
        pass

    @abstractmethod
    async def get_mood_entries(self, start: datetime, end: datetime) -> list[MoodEntry]:
        pass

    @abstractmethod
    async def get_focus_sessions(
        self, start: datetime, end: datetime
    ) -> list[FocusSessionRecord]:
        pass


def _in_range(
    items: Iterable[T], key: Callable[[T], datetime], start: datetime, end: datetime
) -> list[T]:
    if start > end:
        return []
    return sorted((i for i in items if start <= key(i) <= end), key=key)


class InMemoryHistoryStore(HistoryStore):
    """History held in lists, for callers that already have records in memory."""

    def __init__(
        self,
        completions: Iterable[CompletionRecord] = (),
        energy_logs: Iterable[EnergyEntry] = (),
        mood_entries: Iterable[MoodEntry] = (),
        focus_sessions: Iterable[FocusSessionRecord] = (),
    ):
        self.completions = list(completions)
        self.energy_logs = list(energy_logs)
        self.mood_entries = list(mood_entries)
        self.focus_sessions = list(focus_sessions)

    def add_completion(self, record: CompletionRecord) -> None:
        self.completions.append(record)

    def add_energy_log(self, entry: EnergyEntry) -> None:
        self.energy_logs.append(entry)

    def add_mood_entry(self, entry: MoodEntry) -> None:
        self.mood_entries.append(entry)

    def add_focus_session(self, record: FocusSessionRecord) -> None:
        self.focus_sessions.append(record)

    async def get_completions(self, start: datetime, end: datetime) -> list[CompletionRecord]:
        return _in_range(self.completions, lambda c: c.completed_at, start, end)

    async def get_energy_logs(self, start: datetime, end: datetime) -> list[EnergyEntry]:
        return _in_range(self.energy_logs, lambda e: e.timestamp, start, end)

    async def get_mood_entries(self, start: datetime, end: datetime) -> list[MoodEntry]:
        return _in_range(self.mood_entries, lambda m: m.timestamp, start, end)

    async def get_focus_sessions(
        self, start: datetime, end: datetime
    ) -> list[FocusSessionRecord]:
        return _in_range(self.focus_sessions, lambda f: f.started_at, start, end)


class SQLiteHistoryStore(HistoryStore):
    """
    History persisted in data/history.db, scoped to one user.

    Writes log and return False on failure. Reads propagate sqlite errors so
    the caller can keep its previous snapshot.
    """

    def __init__(self, user_id: str, db_path: Path | None = None):
        self.user_id = user_id
        self.db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def _insert(self, table: str, values: dict) -> bool:
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        try:
            conn = self._connect()
            try:
                conn.execute(
                    f"INSERT OR REPLACE INTO {table} ({columns}) VALUES ({placeholders})",
                    list(values.values()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("history_write_failed", table=table, user_id=self.user_id, error=str(e))
            return False
        return True

    def _select(self, table: str, time_column: str, start: datetime, end: datetime) -> list[dict]:
        if start > end:
            return []
        conn = self._connect()
        try:
            cursor = conn.execute(
                f"""
                SELECT * FROM {table}
                WHERE user_id = ? AND {time_column} >= ? AND {time_column} <= ?
                ORDER BY {time_column}
                """,
                (self.user_id, start.isoformat(), end.isoformat()),
            )
            return [dict(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    async def record_completion(self, record: CompletionRecord) -> bool:
        return self._insert(
            "completions",
            {
                "id": record.id,
                "user_id": self.user_id,
                "task_id": record.task_id,
                "task_title": record.task_title,
                "energy": record.energy.value,
                "completed_at": record.completed_at.isoformat(),
                "completion_duration_ms": record.completion_duration_ms,
                "mood": record.mood.value if record.mood else None,
            },
        )

    async def record_energy(self, entry: EnergyEntry) -> bool:
        return self._insert("energy_logs", {"user_id": self.user_id, **entry.to_dict()})

    async def record_mood(self, entry: MoodEntry) -> bool:
        return self._insert("mood_entries", {"user_id": self.user_id, **entry.to_dict()})

    async def record_focus_session(self, record: FocusSessionRecord) -> bool:
        return self._insert("focus_sessions", {"user_id": self.user_id, **record.to_dict()})

    async def get_completions(self, start: datetime, end: datetime) -> list[CompletionRecord]:
        rows = self._select("completions", "completed_at", start, end)
        return ingest_rows(rows, CompletionRecord)

    async def get_energy_logs(self, start: datetime, end: datetime) -> list[EnergyEntry]:
        rows = self._select("energy_logs", "timestamp", start, end)
        return ingest_rows(rows, EnergyEntry)

    async def get_mood_entries(self, start: datetime, end: datetime) -> list[MoodEntry]:
        rows = self._select("mood_entries", "timestamp", start, end)
        return ingest_rows(rows, MoodEntry)

    async def get_focus_sessions(
        self, start: datetime, end: datetime
    ) -> list[FocusSessionRecord]:
        rows = self._select("focus_sessions", "started_at", start, end)
        return ingest_rows(rows, FocusSessionRecord)


async def load_snapshot(store: HistoryStore, start: datetime, end: datetime) -> HistorySnapshot:
    """Read all four record streams for the range into one snapshot."""
    completions, energy_logs, mood_entries, focus_sessions = await asyncio.gather(
        store.get_completions(start, end),
        store.get_energy_logs(start, end),
        store.get_mood_entries(start, end),
        store.get_focus_sessions(start, end),
    )
    return HistorySnapshot(
        completions=tuple(completions),
        energy_logs=tuple(energy_logs),
        mood_entries=tuple(mood_entries),
        focus_sessions=tuple(focus_sessions),
    )
