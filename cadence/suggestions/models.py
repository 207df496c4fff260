"""
Suggestion models.

SuggestionContext and TaskSuggestion are ephemeral: built per request,
never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cadence.history.models import EnergyLevel, MoodLevel, generate_id


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


class ActivityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CalendarProximity(str, Enum):
    FREE = "free"
    BUSY_SOON = "busy_soon"
    JUST_FINISHED = "just_finished"


@dataclass(frozen=True)
class SuggestionContext:
    time_of_day: TimeOfDay
    current_energy: EnergyLevel | None
    current_mood: MoodLevel | None
    is_peak_hour: bool
    recent_activity_level: ActivityLevel
    calendar_proximity: CalendarProximity

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_of_day": self.time_of_day.value,
            "current_energy": self.current_energy.value if self.current_energy else None,
            "current_mood": self.current_mood.value if self.current_mood else None,
            "is_peak_hour": self.is_peak_hour,
            "recent_activity_level": self.recent_activity_level.value,
            "calendar_proximity": self.calendar_proximity.value,
        }


@dataclass(frozen=True)
class TaskSuggestion:
    task_id: str
    reason: str
    score: float
    confidence: float
    context: SuggestionContext
    id: str = field(default_factory=lambda: generate_id("sug"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "reason": self.reason,
            "score": self.score,
            "confidence": self.confidence,
            "context": self.context.to_dict(),
        }
