"""
Tool: Suggestion Scorer
Purpose: Rank incomplete tasks against the current context

Every task starts at 50 and collects additive adjustments:

    1. Energy match        exact +30, one step down +10, low ctx/high task -20
    2. Peak hour           high-energy task +20
    3. Low mood            low-energy or micro-step +25, high-energy -15
    4. High mood           high-energy task +15
    5. Time of day         morning/high +10, evening/low +10, night/high -20
    6. Calendar            busy_soon: quick +15 else -10; free: high-energy +10
    7. Recent activity     low activity + micro-step +20
    8. Micro-step          +10
    9. Age                 min(age_days * 2, 10) once older than 2 days

The final score is clamped to [0, 100] and confidence is score / 100.

Usage:
    from cadence.suggestions.scorer import get_suggestions

    suggestions = get_suggestions(tasks, context, now=datetime.now(), limit=3)
"""

from collections.abc import Sequence
from datetime import datetime

from cadence.history.models import EnergyLevel, MoodLevel, Task
from cadence.logging_config import get_logger
from cadence.suggestions.models import (
    ActivityLevel,
    CalendarProximity,
    SuggestionContext,
    TaskSuggestion,
    TimeOfDay,
)


logger = get_logger(__name__)

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100
DEFAULT_LIMIT = 3

# (context energy, task energy) pairs one step apart
ADJACENT_ENERGY = {
    (EnergyLevel.HIGH, EnergyLevel.MEDIUM),
    (EnergyLevel.MEDIUM, EnergyLevel.LOW),
}

FALLBACK_REASON = "Solid choice for right now"


def _is_quick(task: Task) -> bool:
    return task.is_micro_step or task.energy == EnergyLevel.LOW


def score_task(task: Task, context: SuggestionContext, now: datetime) -> float:
    """Score one task in [0, 100]."""
    score = float(BASE_SCORE)
    energy = task.energy
    high = energy == EnergyLevel.HIGH

    # 1. Energy matching
    if context.current_energy is not None:
        if energy == context.current_energy:
            score += 30
        elif (context.current_energy, energy) in ADJACENT_ENERGY:
            score += 10
        elif context.current_energy == EnergyLevel.LOW and high:
            score -= 20

    # 2. Peak hour
    if context.is_peak_hour and high:
        score += 20

    # 3. Low mood prefers easy wins
    if context.current_mood == MoodLevel.LOW:
        if _is_quick(task):
            score += 25
        elif high:
            score -= 15

    # 4. High mood can handle more
    if context.current_mood == MoodLevel.HIGH and high:
        score += 15

    # 5. Time of day
    if context.time_of_day == TimeOfDay.MORNING and high:
        score += 10
    if context.time_of_day == TimeOfDay.EVENING and energy == EnergyLevel.LOW:
        score += 10
    if context.time_of_day == TimeOfDay.NIGHT and high:
        score -= 20

    # 6. Calendar
    if context.calendar_proximity == CalendarProximity.BUSY_SOON:
        score += 15 if _is_quick(task) else -10
    if context.calendar_proximity == CalendarProximity.FREE and high:
        score += 10

    # 7. After a break
    if context.recent_activity_level == ActivityLevel.LOW and task.is_micro_step:
        score += 20

    # 8. Task initiation
    if task.is_micro_step:
        score += 10

    # 9. Older tasks get slight priority
    age = task.age_in_days(now)
    if age > 2:
        score += min(age * 2, 10)

    return max(MIN_SCORE, min(MAX_SCORE, score))


def generate_reason(task: Task, context: SuggestionContext, now: datetime) -> str:
    """First matching rationale in fixed priority order."""
    high = task.energy == EnergyLevel.HIGH
    templates = [
        (context.is_peak_hour and high, "It's your peak productivity hour"),
        (context.current_energy == task.energy, f"Matches your {task.energy.value} energy level"),
        (context.current_mood == MoodLevel.LOW and _is_quick(task),
         "Easy win for when energy is low"),
        (context.calendar_proximity == CalendarProximity.BUSY_SOON and _is_quick(task),
         "Quick task before your next event"),
        (context.calendar_proximity == CalendarProximity.FREE and high,
         "You have a clear window for focused work"),
        (task.is_micro_step, "Small step to build momentum"),
        (task.age_in_days(now) > 3, "Been waiting for attention"),
        (context.time_of_day == TimeOfDay.MORNING and high,
         "Morning is great for challenging tasks"),
    ]

    for matched, text in templates:
        if matched:
            return text
    return FALLBACK_REASON


def get_suggestions(
    tasks: Sequence[Task],
    context: SuggestionContext,
    now: datetime,
    limit: int = DEFAULT_LIMIT,
) -> list[TaskSuggestion]:
    """
    Rank incomplete tasks and return the top ``limit``.

    Args:
        tasks: Candidate tasks; completed ones are ignored
        context: Output of build_context
        now: Reference time for task age
        limit: Maximum number of suggestions

    Returns:
        Suggestions ordered by score; equal scores keep input order
    """
    pending = [t for t in tasks if not t.completed]
    if not pending or limit <= 0:
        return []

    scored = [(task, score_task(task, context, now)) for task in pending]
    # sorted() is stable, so ties keep their input order
    scored = sorted(scored, key=lambda pair: pair[1], reverse=True)

    suggestions = [
        TaskSuggestion(
            task_id=task.id,
            reason=generate_reason(task, context, now),
            score=score,
            confidence=score / 100,
            context=context,
        )
        for task, score in scored[:limit]
    ]

    logger.debug("suggestions_ranked", candidates=len(pending), returned=len(suggestions))
    return suggestions


def get_top_suggestion(
    tasks: Sequence[Task], context: SuggestionContext, now: datetime
) -> TaskSuggestion | None:
    suggestions = get_suggestions(tasks, context, now, limit=1)
    return suggestions[0] if suggestions else None


def explain_suggestion(suggestion: TaskSuggestion, task: Task) -> str:
    """Multi-line explanation of why a task was suggested."""
    ctx = suggestion.context
    parts = []

    if ctx.is_peak_hour:
        parts.append("📈 You're in a peak productivity window")
    if ctx.current_energy == task.energy:
        parts.append(f"⚡ Perfect match for your {task.energy.value} energy")
    if ctx.current_mood == MoodLevel.LOW and task.energy == EnergyLevel.LOW:
        parts.append("💙 Gentle task for when things feel heavy")
    if ctx.calendar_proximity == CalendarProximity.FREE:
        parts.append("📅 Your calendar is clear - great for focused work")
    if ctx.calendar_proximity == CalendarProximity.BUSY_SOON:
        parts.append("⏰ Quick win before your next commitment")
    if task.is_micro_step:
        parts.append("✨ Tiny step to get you started")

    if not parts:
        parts.append("🎯 Solid choice based on your patterns")

    return "\n".join(parts)
