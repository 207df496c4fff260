"""
Tool: Engagement Models
Purpose: Data structures for check-ins, nudges and notification history

Usage:
    from cadence.engagement.models import (
        ProactiveCheckIn,
        CheckInType,
        ScheduledNudge,
        NudgeType,
        NotificationHistoryEntry,
        OptimalTimeSlot,
        UserProfile,
        NotificationStyle,
    )
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cadence.history.models import generate_id, parse_timestamp


SCHEDULED_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class CheckInType(str, Enum):
    """Why a proactive check-in fired."""

    LONG_INACTIVITY = "long_inactivity"
    PEAK_TIME = "peak_time"
    ENERGY_DIP = "energy_dip"
    MOOD_BASED = "mood_based"
    PATTERN_BASED = "pattern_based"
    SCHEDULED = "scheduled"


class NudgeType(str, Enum):
    FOCUS_REMINDER = "focus_reminder"
    ENERGY_CHECK = "energy_check"
    TASK_SUGGESTION = "task_suggestion"
    BREAK_REMINDER = "break_reminder"


class NotificationStyle(str, Enum):
    """
    Delivery tone.

    gentle: long, sparse delays
    variable: irregular delays that resist habituation
    persistent: short, regular delays
    """

    GENTLE = "gentle"
    VARIABLE = "variable"
    PERSISTENT = "persistent"


@dataclass
class ProactiveCheckIn:
    """
    A check-in offered to the user.

    Lifecycle: scheduled -> delivered -> responded (or left ignored).
    Only the response-recording operation mutates an existing check-in.
    """

    id: str
    type: CheckInType
    message: str
    scheduled_time: datetime
    delivered: bool = False
    responded: bool = False
    response: str | None = None

    @property
    def is_pending(self) -> bool:
        """Delivered but not yet answered."""
        return self.delivered and not self.responded

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "message": self.message,
            "scheduled_time": self.scheduled_time.isoformat(),
            "delivered": self.delivered,
            "responded": self.responded,
            "response": self.response,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProactiveCheckIn":
        return cls(
            id=str(data["id"]),
            type=CheckInType(data["type"]),
            message=str(data["message"]),
            scheduled_time=parse_timestamp(data["scheduled_time"]),
            delivered=bool(data.get("delivered", False)),
            responded=bool(data.get("responded", False)),
            response=data.get("response"),
        )

    @staticmethod
    def generate_id() -> str:
        return generate_id("chk")


@dataclass
class ScheduledNudge:
    """
    A recurring reminder at a fixed local time.

    repeat_days uses 0=Sunday ... 6=Saturday.
    """

    id: str
    user_id: str
    scheduled_time: str  # "HH:MM"
    type: NudgeType
    message: str
    enabled: bool = True
    repeat_days: list[int] = field(default_factory=lambda: [1, 2, 3, 4, 5])

    def __post_init__(self):
        if not SCHEDULED_TIME_PATTERN.match(self.scheduled_time):
            raise ValueError(f"scheduled_time must be HH:MM, got {self.scheduled_time!r}")
        if any(d < 0 or d > 6 for d in self.repeat_days):
            raise ValueError(f"repeat_days must be within 0-6, got {self.repeat_days}")

    @property
    def hour(self) -> int:
        return int(self.scheduled_time[:2])

    @property
    def minute(self) -> int:
        return int(self.scheduled_time[3:])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "scheduled_time": self.scheduled_time,
            "type": self.type.value,
            "message": self.message,
            "enabled": self.enabled,
            "repeat_days": list(self.repeat_days),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledNudge":
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            scheduled_time=str(data["scheduled_time"]),
            type=NudgeType(data["type"]),
            message=str(data["message"]),
            enabled=bool(data.get("enabled", True)),
            repeat_days=[int(d) for d in data.get("repeat_days", [])],
        )

    @staticmethod
    def generate_id(kind: str) -> str:
        """e.g. generate_id("focus") -> "nudge_focus_3f9a1c0b2d4e"."""
        return generate_id(f"nudge_{kind}")

    @staticmethod
    def recommended_id(kind: str, user_id: str) -> str:
        """Stable id for a recommended nudge, so recommending again overwrites it."""
        return f"nudge_{kind}_{user_id}"


@dataclass
class NotificationHistoryEntry:
    """Audit entry for one ad-hoc notification."""

    id: str
    type: str
    sent_at: datetime
    acknowledged_at: datetime | None = None
    dismissed: bool = False
    action_taken: bool = False

    @property
    def dismissed_without_action(self) -> bool:
        return self.dismissed and not self.action_taken

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "sent_at": self.sent_at.isoformat(),
            "acknowledged_at": self.acknowledged_at.isoformat() if self.acknowledged_at else None,
            "dismissed": self.dismissed,
            "action_taken": self.action_taken,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotificationHistoryEntry":
        acknowledged = data.get("acknowledged_at")
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            sent_at=parse_timestamp(data["sent_at"]),
            acknowledged_at=parse_timestamp(acknowledged) if acknowledged else None,
            dismissed=bool(data.get("dismissed", False)),
            action_taken=bool(data.get("action_taken", False)),
        )


@dataclass(frozen=True)
class OptimalTimeSlot:
    hour: int
    confidence: int
    reason: str
    best_days_of_week: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hour": self.hour,
            "confidence": self.confidence,
            "reason": self.reason,
            "best_days_of_week": list(self.best_days_of_week),
        }


@dataclass
class UserProfile:
    """Per-user engagement switches."""

    user_id: str
    proactive_checkins_enabled: bool = True
    smart_notifications_enabled: bool = True
    notification_style: NotificationStyle = NotificationStyle.GENTLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "proactive_checkins_enabled": self.proactive_checkins_enabled,
            "smart_notifications_enabled": self.smart_notifications_enabled,
            "notification_style": self.notification_style.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        return cls(
            user_id=str(data["user_id"]),
            proactive_checkins_enabled=bool(data.get("proactive_checkins_enabled", True)),
            smart_notifications_enabled=bool(data.get("smart_notifications_enabled", True)),
            notification_style=NotificationStyle(data.get("notification_style", "gentle")),
        )
