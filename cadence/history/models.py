"""
Tool: History Record Models
Purpose: Typed, immutable records for a user's behavioral history

Every record the engine analyses passes through ``from_dict`` first, so the
analysis code never sees loosely-typed rows. ``from_dict`` raises
``ValueError`` for malformed rows; ``ingest_rows`` logs and skips them so a
single bad row never poisons an aggregation.

Usage:
    from cadence.history.models import (
        CompletionRecord,
        EnergyEntry,
        MoodEntry,
        FocusSessionRecord,
        HistorySnapshot,
        ingest_rows,
    )

Conventions:
    - Timestamps are naive local datetimes (aware values are converted)
    - day_of_week is 0=Sunday ... 6=Saturday
    - Energy logs use a 1-10 scale; named levels are mapped onto it
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from cadence.logging_config import get_logger


logger = get_logger(__name__)


class EnergyLevel(str, Enum):
    """Self-reported or task-required energy."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MoodLevel(str, Enum):
    """Self-reported mood."""

    LOW = "low"
    NEUTRAL = "neutral"
    HIGH = "high"


# Numeric weights used for averaging
ENERGY_WEIGHTS = {EnergyLevel.LOW: 1, EnergyLevel.MEDIUM: 2, EnergyLevel.HIGH: 3}
MOOD_VALUES = {MoodLevel.LOW: 1, MoodLevel.NEUTRAL: 2, MoodLevel.HIGH: 3}

# Energy log scale
ENERGY_SCALE_MIN = 1.0
ENERGY_SCALE_MAX = 10.0
NAMED_ENERGY_SCALE = {"low": 3.0, "medium": 5.0, "high": 8.0}

MOOD_CONTEXTS = ["morning", "afternoon", "evening", "task_completion", "checkin"]


def generate_id(prefix: str) -> str:
    """Generate a short prefixed identifier."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def parse_energy(value: Any) -> EnergyLevel:
    if isinstance(value, EnergyLevel):
        return value
    if isinstance(value, str):
        try:
            return EnergyLevel(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Invalid energy level: {value!r}")


def parse_mood(value: Any) -> MoodLevel:
    if isinstance(value, MoodLevel):
        return value
    if isinstance(value, str):
        try:
            return MoodLevel(value.strip().lower())
        except ValueError:
            pass
    raise ValueError(f"Invalid mood: {value!r}")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO string or datetime into a naive local datetime."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def day_of_week(ts: datetime) -> int:
    """Day index with Sunday as 0."""
    return (ts.weekday() + 1) % 7


def _optional_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    return parse_timestamp(value)


def _isoformat(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts else None


@dataclass(frozen=True)
class CompletionRecord:
    """A task marked done. Appended by the surrounding application."""

    id: str
    task_id: str
    task_title: str
    energy: EnergyLevel
    completed_at: datetime
    completion_duration_ms: int | None = None
    mood: MoodLevel | None = None

    def __post_init__(self):
        if self.completion_duration_ms is not None and self.completion_duration_ms < 0:
            raise ValueError("completion_duration_ms cannot be negative")

    @property
    def hour(self) -> int:
        return self.completed_at.hour

    @property
    def day_of_week(self) -> int:
        return day_of_week(self.completed_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "task_title": self.task_title,
            "energy": self.energy.value,
            "completed_at": self.completed_at.isoformat(),
            "hour": self.hour,
            "day_of_week": self.day_of_week,
            "completion_duration_ms": self.completion_duration_ms,
            "mood": self.mood.value if self.mood else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletionRecord":
        energy = data.get("energy", data.get("energy_level"))
        mood = data.get("mood")
        duration = data.get("completion_duration_ms")
        return cls(
            id=str(data.get("id") or generate_id("cmp")),
            task_id=str(data["task_id"]),
            task_title=str(data.get("task_title") or ""),
            energy=parse_energy(energy),
            completed_at=parse_timestamp(data.get("completed_at")),
            completion_duration_ms=int(duration) if duration is not None else None,
            mood=parse_mood(mood) if mood else None,
        )


@dataclass(frozen=True)
class EnergyEntry:
    """Energy check-in on the 1-10 scale."""

    id: str
    level: float
    timestamp: datetime
    notes: str | None = None
    context: str | None = None

    @property
    def hour(self) -> int:
        return self.timestamp.hour

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "timestamp": self.timestamp.isoformat(),
            "notes": self.notes,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnergyEntry":
        raw = data.get("level", data.get("energy_level"))
        if isinstance(raw, str) and raw.strip().lower() in NAMED_ENERGY_SCALE:
            level = NAMED_ENERGY_SCALE[raw.strip().lower()]
        elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
            # Out-of-range readings are clamped rather than dropped
            level = min(ENERGY_SCALE_MAX, max(ENERGY_SCALE_MIN, float(raw)))
        else:
            raise ValueError(f"Invalid energy level: {raw!r}")

        return cls(
            id=str(data.get("id") or generate_id("nrg")),
            level=level,
            timestamp=parse_timestamp(data.get("timestamp", data.get("logged_at"))),
            notes=data.get("notes"),
            context=data.get("context"),
        )


@dataclass(frozen=True)
class MoodEntry:
    """Mood check-in, optionally tagged with the energy felt at the time."""

    id: str
    mood: MoodLevel
    timestamp: datetime
    energy: EnergyLevel | None = None
    notes: str | None = None
    context: str | None = None

    def __post_init__(self):
        if self.context is not None and self.context not in MOOD_CONTEXTS:
            raise ValueError(f"Invalid mood context: {self.context!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mood": self.mood.value,
            "timestamp": self.timestamp.isoformat(),
            "energy": self.energy.value if self.energy else None,
            "notes": self.notes,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MoodEntry":
        energy = data.get("energy")
        return cls(
            id=str(data.get("id") or generate_id("mood")),
            mood=parse_mood(data.get("mood")),
            timestamp=parse_timestamp(data.get("timestamp")),
            energy=parse_energy(energy) if energy else None,
            notes=data.get("notes"),
            context=data.get("context"),
        )


@dataclass(frozen=True)
class FocusSessionRecord:
    """A finished focus session."""

    id: str
    started_at: datetime
    duration_minutes: float
    ended_at: datetime | None = None
    task_id: str | None = None

    def __post_init__(self):
        if self.duration_minutes < 0:
            raise ValueError("duration_minutes cannot be negative")
        if self.ended_at is not None and self.ended_at < self.started_at:
            raise ValueError("ended_at cannot precede started_at")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "started_at": self.started_at.isoformat(),
            "ended_at": _isoformat(self.ended_at),
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FocusSessionRecord":
        started_at = parse_timestamp(data.get("started_at"))
        ended_at = _optional_timestamp(data.get("ended_at"))
        duration = data.get("duration_minutes")
        if duration is None:
            duration = (ended_at - started_at).total_seconds() / 60 if ended_at else 0.0

        return cls(
            id=str(data.get("id") or generate_id("focus")),
            started_at=started_at,
            duration_minutes=float(duration),
            ended_at=ended_at,
            task_id=data.get("task_id"),
        )


@dataclass(frozen=True)
class Task:
    """A candidate task handed to the suggestion scorer."""

    id: str
    title: str
    energy: EnergyLevel
    created_at: datetime
    completed: bool = False
    is_micro_step: bool = False
    estimated_minutes: int | None = None

    def age_in_days(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds() / 86400

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "energy": self.energy.value,
            "created_at": self.created_at.isoformat(),
            "completed": self.completed,
            "is_micro_step": self.is_micro_step,
            "estimated_minutes": self.estimated_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        estimated = data.get("estimated_minutes")
        return cls(
            id=str(data.get("id") or generate_id("task")),
            title=str(data.get("title") or ""),
            energy=parse_energy(data.get("energy", data.get("energy_level"))),
            created_at=parse_timestamp(data.get("created_at")),
            completed=bool(data.get("completed", False)),
            is_micro_step=bool(data.get("is_micro_step", False)),
            estimated_minutes=int(estimated) if estimated is not None else None,
        )


@dataclass(frozen=True)
class CalendarEvent:
    """An entry from the optional external calendar feed."""

    id: str
    title: str
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError("Calendar event ends before it starts")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalendarEvent":
        return cls(
            id=str(data.get("id") or generate_id("evt")),
            title=str(data.get("title") or ""),
            start=parse_timestamp(data.get("start")),
            end=parse_timestamp(data.get("end")),
        )


@dataclass(frozen=True)
class HistorySnapshot:
    """Point-in-time view of everything the engine is allowed to read."""

    completions: tuple[CompletionRecord, ...] = field(default_factory=tuple)
    energy_logs: tuple[EnergyEntry, ...] = field(default_factory=tuple)
    mood_entries: tuple[MoodEntry, ...] = field(default_factory=tuple)
    focus_sessions: tuple[FocusSessionRecord, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (
            self.completions or self.energy_logs or self.mood_entries or self.focus_sessions
        )

    @property
    def last_activity_at(self) -> datetime | None:
        """Most recent timestamp across all record types."""
        stamps = [c.completed_at for c in self.completions]
        stamps += [e.timestamp for e in self.energy_logs]
        stamps += [m.timestamp for m in self.mood_entries]
        stamps += [f.ended_at or f.started_at for f in self.focus_sessions]
        return max(stamps) if stamps else None


RecordT = TypeVar("RecordT")


def ingest_rows(rows: Iterable[dict[str, Any]], record_type: type[RecordT]) -> list[RecordT]:
    """
    Map raw rows to typed records, skipping malformed ones.

    Args:
        rows: Loosely-typed rows from a persistence client
        record_type: Record class exposing ``from_dict``

    Returns:
        List of valid records in input order
    """
    records = []
    skipped = 0
    for row in rows:
        try:
            records.append(record_type.from_dict(row))
        except (ValueError, TypeError, KeyError) as e:
            skipped += 1
            logger.warning(
                "skipping_malformed_record",
                record_type=record_type.__name__,
                record_id=row.get("id") if isinstance(row, dict) else None,
                error=str(e),
            )

    if skipped:
        logger.info("ingestion_complete", record_type=record_type.__name__,
                    accepted=len(records), skipped=skipped)
    return records
