"""
Tool: Nudge Time Optimizer
Purpose: Find the best daily hours for reminders and build a nudge schedule

Scoring (trailing 30 days, hours 6-22):
    focus   = total focus minutes started in the hour / max over the hours
    energy  = average logged energy in the hour (5 when none) / max over the hours
    score   = 0.6 * focus + 0.4 * energy

The top 3 hours become OptimalTimeSlots; ties keep the earlier hour. A user
with no history still gets 3 slots.

Usage:
    from cadence.engagement.nudges import find_optimal_time_slots, generate_recommended_nudges

    slots = find_optimal_time_slots(snapshot.focus_sessions, snapshot.energy_logs, now)
    nudges = generate_recommended_nudges(slots, user_id="alice")
"""

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any

from cadence.config_models import NudgeConfig
from cadence.engagement.messages import NUDGE_MESSAGES
from cadence.engagement.models import (
    NotificationHistoryEntry,
    NudgeType,
    OptimalTimeSlot,
    ScheduledNudge,
)
from cadence.history.models import EnergyEntry, FocusSessionRecord, Task, day_of_week
from cadence.logging_config import get_logger


logger = get_logger(__name__)

MINUTES_PER_SESSION = 25
MAX_BEST_DAYS = 5
QUICK_TASK_MINUTES = 15
QUICK_TASK_CANDIDATES = 5

RECOMMENDED_KINDS = ("focus", "energy", "afternoon")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _focus_by_hour_and_day(
    sessions: Iterable[FocusSessionRecord],
) -> tuple[dict[int, float], dict[int, float]]:
    by_hour: dict[int, float] = defaultdict(float)
    by_day: dict[int, float] = defaultdict(float)
    for session in sessions:
        by_hour[session.started_at.hour] += session.duration_minutes
        by_day[day_of_week(session.started_at)] += session.duration_minutes
    return by_hour, by_day


def _average_energy_by_hour(energy_logs: Iterable[EnergyEntry]) -> dict[int, float]:
    totals: dict[int, list[float]] = defaultdict(list)
    for entry in energy_logs:
        totals[entry.hour].append(entry.level)
    return {hour: sum(levels) / len(levels) for hour, levels in totals.items()}


def _slot_reason(focus_minutes: float, energy: float | None, config: NudgeConfig) -> str:
    feel = "high" if energy is not None and energy >= config.high_energy_threshold else "steady"
    if focus_minutes > 0 and energy is not None:
        return f"You've had {round_half_up(focus_minutes)} minutes of focus here with {feel} energy"
    if focus_minutes > 0:
        sessions = round_half_up(focus_minutes / MINUTES_PER_SESSION)
        return f"You've successfully focused here {sessions} times"
    if energy is not None:
        return f"Your energy tends to be {feel} around this time"
    return "Based on typical patterns for your schedule"


def get_best_days(focus_by_day: dict[int, float]) -> list[int]:
    """Up to 5 days ordered by focus minutes, earlier day first on ties."""
    days = [d for d, minutes in focus_by_day.items() if minutes > 0]
    return sorted(days, key=lambda d: (-focus_by_day[d], d))[:MAX_BEST_DAYS]


def find_optimal_time_slots(
    focus_sessions: Sequence[FocusSessionRecord],
    energy_logs: Sequence[EnergyEntry],
    now: datetime,
    config: NudgeConfig | None = None,
) -> list[OptimalTimeSlot]:
    """
    Rank hours of the day by focus history and energy.

    Args:
        focus_sessions: Focus session snapshot (filtered to the lookback here)
        energy_logs: Energy log snapshot (filtered to the lookback here)
        now: End of the lookback window
        config: Nudge settings

    Returns:
        Exactly slot_count slots, best first
    """
    config = config or NudgeConfig()
    since = now - timedelta(days=config.lookback_days)

    sessions = [s for s in focus_sessions if since <= s.started_at <= now]
    logs = [e for e in energy_logs if since <= e.timestamp <= now]

    focus_by_hour, focus_by_day = _focus_by_hour_and_day(sessions)
    energy_by_hour = _average_energy_by_hour(logs)

    hours = range(config.first_hour, config.last_hour + 1)
    focus_series = {h: focus_by_hour.get(h, 0.0) for h in hours}
    energy_series = {h: energy_by_hour.get(h, config.default_energy) for h in hours}

    max_focus = max(focus_series.values()) or 1.0
    max_energy = max(energy_series.values()) or 1.0

    scores = {
        h: config.focus_weight * focus_series[h] / max_focus
        + config.energy_weight * energy_series[h] / max_energy
        for h in hours
    }
    ranked = sorted(hours, key=lambda h: (-scores[h], h))[: config.slot_count]
    best_days = get_best_days(focus_by_day)

    slots = [
        OptimalTimeSlot(
            hour=h,
            confidence=round_half_up(scores[h] * 100),
            reason=_slot_reason(focus_series[h], energy_by_hour.get(h), config),
            best_days_of_week=list(best_days),
        )
        for h in ranked
    ]

    logger.debug(
        "optimal_slots_found",
        sessions=len(sessions),
        energy_logs=len(logs),
        hours=[s.hour for s in slots],
    )
    return slots


def format_scheduled_time(hour: int, minute: int = 0) -> str:
    return f"{hour:02d}:{minute:02d}"


def generate_recommended_nudges(
    slots: Sequence[OptimalTimeSlot],
    user_id: str,
    config: NudgeConfig | None = None,
) -> list[ScheduledNudge]:
    """
    Turn optimal slots into a default nudge schedule.

    Slot 1 becomes a focus reminder and slot 2 an energy check. An afternoon
    task suggestion is always added on weekdays.
    """
    config = config or NudgeConfig()
    nudges = []

    slot_types = [("focus", NudgeType.FOCUS_REMINDER), ("energy", NudgeType.ENERGY_CHECK)]
    for slot, (kind, nudge_type) in zip(slots, slot_types):
        nudges.append(ScheduledNudge(
            id=ScheduledNudge.recommended_id(kind, user_id),
            user_id=user_id,
            scheduled_time=format_scheduled_time(slot.hour),
            type=nudge_type,
            message=NUDGE_MESSAGES[nudge_type.value],
            enabled=True,
            repeat_days=list(slot.best_days_of_week or config.default_repeat_days),
        ))

    nudges.append(ScheduledNudge(
        id=ScheduledNudge.recommended_id("afternoon", user_id),
        user_id=user_id,
        scheduled_time=format_scheduled_time(config.afternoon_hour),
        type=NudgeType.TASK_SUGGESTION,
        message=NUDGE_MESSAGES[NudgeType.TASK_SUGGESTION.value],
        enabled=True,
        repeat_days=list(config.default_repeat_days),
    ))

    return nudges


def recommended_nudge_ids(user_id: str) -> set[str]:
    return {ScheduledNudge.recommended_id(kind, user_id) for kind in RECOMMENDED_KINDS}


def should_fire_nudge(
    nudge: ScheduledNudge, now: datetime, config: NudgeConfig | None = None
) -> bool:
    """True when an enabled nudge is due within the fire window today."""
    config = config or NudgeConfig()
    if not nudge.enabled or day_of_week(now) not in nudge.repeat_days:
        return False

    scheduled = nudge.hour * 60 + nudge.minute
    current = now.hour * 60 + now.minute
    return abs(scheduled - current) <= config.fire_window_minutes


def next_fire_time(nudge: ScheduledNudge, now: datetime) -> datetime | None:
    """Next time after now that the nudge falls on one of its repeat days."""
    candidate = now.replace(hour=nudge.hour, minute=nudge.minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)

    for _ in range(7):
        if day_of_week(candidate) in nudge.repeat_days:
            return candidate
        candidate += timedelta(days=1)
    return None


def pick_quick_task(tasks: Sequence[Task]) -> tuple[Task, str] | None:
    """
    Pick a task for a task-suggestion nudge.

    Among the five oldest pending tasks, the first estimated at 15 minutes or
    less wins; otherwise the oldest.
    """
    pending = sorted((t for t in tasks if not t.completed), key=lambda t: t.created_at)
    candidates = pending[:QUICK_TASK_CANDIDATES]
    if not candidates:
        return None

    quick = next(
        (
            t for t in candidates
            if t.estimated_minutes and t.estimated_minutes <= QUICK_TASK_MINUTES
        ),
        candidates[0],
    )
    if quick.estimated_minutes:
        reason = f"It's a quick one - about {quick.estimated_minutes} minutes"
    else:
        reason = "It's been waiting for a bit - let's knock it out!"
    return quick, reason


def summarize_nudge_effectiveness(
    history: Iterable[NotificationHistoryEntry],
) -> dict[str, dict[str, Any]]:
    """Sent count, actioned count and action rate per notification type."""
    summary: dict[str, dict[str, Any]] = {}
    for entry in history:
        stats = summary.setdefault(entry.type, {"sent": 0, "actioned": 0, "action_rate": 0.0})
        stats["sent"] += 1
        if entry.action_taken:
            stats["actioned"] += 1

    for stats in summary.values():
        stats["action_rate"] = stats["actioned"] / stats["sent"]
    return summary
