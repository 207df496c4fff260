"""
Integration test fixtures for Cadence.

Provides fixtures specific to integration testing:
- FastAPI test client over isolated databases
- A helper that seeds the SQLite history store
"""

import asyncio
from collections.abc import Callable, Generator, Sequence

import pytest
from fastapi.testclient import TestClient

from cadence.history.models import CompletionRecord, EnergyEntry, FocusSessionRecord, MoodEntry
from cadence.history.store import SQLiteHistoryStore


# ─────────────────────────────────────────────────────────────────────────────
# Dashboard API Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def test_client(isolated_dbs) -> Generator[TestClient, None, None]:
    """TestClient over the dashboard app with both databases isolated."""
    from cadence.dashboard.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def seed_history(history_db) -> Callable[..., None]:
    """
    Write records straight into the SQLite history store.

    Usage:
        seed_history("default", completions=[...], mood_entries=[...])
    """

    def _seed(
        user_id: str,
        completions: Sequence[CompletionRecord] = (),
        energy_logs: Sequence[EnergyEntry] = (),
        mood_entries: Sequence[MoodEntry] = (),
        focus_sessions: Sequence[FocusSessionRecord] = (),
    ) -> None:
        store = SQLiteHistoryStore(user_id)

        async def _write():
            for record in completions:
                await store.record_completion(record)
            for entry in energy_logs:
                await store.record_energy(entry)
            for entry in mood_entries:
                await store.record_mood(entry)
            for session in focus_sessions:
                await store.record_focus_session(session)

        asyncio.run(_write())

    return _seed
