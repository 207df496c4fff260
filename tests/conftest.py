"""Shared test fixtures for Cadence tests.

This module provides common fixtures used across all test modules:
- Database isolation with temporary files
- A fixed reference time
- Record builders for completions, energy, mood, focus sessions and tasks

Usage:
    def test_something(isolated_dbs, make_completion, now):
        record = make_completion(now.replace(hour=10))
        ...
"""

import random
from collections.abc import Callable, Generator
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from cadence.config_models import CadenceConfig
from cadence.history.models import (
    CompletionRecord,
    EnergyEntry,
    EnergyLevel,
    FocusSessionRecord,
    MoodEntry,
    MoodLevel,
    Task,
    generate_id,
)


# ─────────────────────────────────────────────────────────────────────────────
# Path Constants
# ─────────────────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).parent.parent

# Wednesday 2026-10-14 10:00 (day_of_week == 3)
REFERENCE_NOW = datetime(2026, 10, 14, 10, 0)


# ─────────────────────────────────────────────────────────────────────────────
# Database Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def history_db(tmp_path: Path) -> Generator[Path, None, None]:
    """Point cadence.history at a temporary database."""
    db_path = tmp_path / "history.db"
    with patch("cadence.history.DB_PATH", db_path):
        yield db_path


@pytest.fixture
def engagement_db(tmp_path: Path) -> Generator[Path, None, None]:
    """Point cadence.engagement at a temporary database."""
    db_path = tmp_path / "engagement.db"
    with patch("cadence.engagement.DB_PATH", db_path):
        yield db_path


@pytest.fixture
def isolated_dbs(history_db: Path, engagement_db: Path) -> tuple[Path, Path]:
    """Both databases isolated for the duration of the test."""
    return history_db, engagement_db


# ─────────────────────────────────────────────────────────────────────────────
# Common Values
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_user_id() -> str:
    """Standard test user ID."""
    return "test_user_123"


@pytest.fixture
def now() -> datetime:
    """Fixed reference time (a Wednesday morning)."""
    return REFERENCE_NOW


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def config() -> CadenceConfig:
    """Default configuration, independent of args/cadence.yaml."""
    return CadenceConfig()


# ─────────────────────────────────────────────────────────────────────────────
# Record Builders
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def make_completion() -> Callable[..., CompletionRecord]:
    def _make(
        at: datetime,
        energy: EnergyLevel = EnergyLevel.MEDIUM,
        mood: MoodLevel | None = None,
        title: str = "Reply to email",
    ) -> CompletionRecord:
        return CompletionRecord(
            id=generate_id("cmp"),
            task_id=generate_id("task"),
            task_title=title,
            energy=energy,
            completed_at=at,
            mood=mood,
        )

    return _make


@pytest.fixture
def make_energy() -> Callable[..., EnergyEntry]:
    def _make(at: datetime, level: float = 5.0) -> EnergyEntry:
        return EnergyEntry(id=generate_id("nrg"), level=level, timestamp=at)

    return _make


@pytest.fixture
def make_mood() -> Callable[..., MoodEntry]:
    def _make(
        at: datetime, mood: MoodLevel = MoodLevel.NEUTRAL, energy: EnergyLevel | None = None
    ) -> MoodEntry:
        return MoodEntry(id=generate_id("mood"), mood=mood, timestamp=at, energy=energy)

    return _make


@pytest.fixture
def make_focus_session() -> Callable[..., FocusSessionRecord]:
    def _make(started_at: datetime, minutes: float = 25.0) -> FocusSessionRecord:
        return FocusSessionRecord(
            id=generate_id("focus"), started_at=started_at, duration_minutes=minutes
        )

    return _make


@pytest.fixture
def make_task() -> Callable[..., Task]:
    def _make(
        created_at: datetime,
        energy: EnergyLevel = EnergyLevel.MEDIUM,
        is_micro_step: bool = False,
        completed: bool = False,
        estimated_minutes: int | None = None,
        title: str = "Do the thing",
        task_id: str | None = None,
    ) -> Task:
        return Task(
            id=task_id or generate_id("task"),
            title=title,
            energy=energy,
            created_at=created_at,
            completed=completed,
            is_micro_step=is_micro_step,
            estimated_minutes=estimated_minutes,
        )

    return _make
