"""
Tool: Insights
Purpose: Turn pattern data into short, encouraging insight cards

Cards are sorted by priority (0 = most urgent). Tone is gentle: slow weeks
are acknowledged, never scolded.

Usage:
    from cadence.learning.insights import generate_insights

    cards = generate_insights(patterns, now, current_energy=EnergyLevel.LOW, tasks=tasks)
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from cadence.history.models import EnergyLevel, MoodLevel, Task, generate_id
from cadence.learning.pattern_analyzer import DAY_NAMES, PatternData, WeeklyTrend, format_hour


MILESTONE_EVERY = 10


class InsightType(str, Enum):
    PEAK_HOURS = "peak_hours"
    ENERGY_PATTERN = "energy_pattern"
    SUGGESTION = "suggestion"
    ACHIEVEMENT = "achievement"
    MOOD_CORRELATION = "mood_correlation"


@dataclass
class Insight:
    type: InsightType
    title: str
    message: str
    emoji: str
    priority: int
    generated_at: datetime
    id: str = field(default_factory=lambda: generate_id("ins"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "emoji": self.emoji,
            "priority": self.priority,
            "generated_at": self.generated_at.isoformat(),
        }


TREND_MESSAGES = {
    WeeklyTrend.IMPROVING: ("📈", "You're completing more tasks than last week! Keep up the momentum!"),
    WeeklyTrend.DECLINING: ("📉", "This week's been slower - that's okay! Be gentle with yourself."),
    WeeklyTrend.STABLE: ("➡️", "You're maintaining a steady pace. Consistency is key!"),
}


def generate_insights(
    patterns: PatternData,
    now: datetime,
    current_energy: EnergyLevel | None = None,
    tasks: Sequence[Task] = (),
    mood: MoodLevel | None = None,
) -> list[Insight]:
    """
    Build insight cards for the current moment.

    Args:
        patterns: Output of analyze_patterns
        now: Current local time
        current_energy: Self-reported energy, if known
        tasks: Candidate tasks (used for the low-energy card)
        mood: Current mood, if known

    Returns:
        Insights sorted by ascending priority
    """
    insights = []

    if patterns.peak_hours:
        peak_times = ", ".join(format_hour(h) for h in patterns.peak_hours)
        insights.append(Insight(
            type=InsightType.PEAK_HOURS,
            title="Your Peak Hours",
            message=f"You're most productive around {peak_times}. "
                    "Try scheduling important tasks during these times!",
            emoji="⚡",
            priority=1,
            generated_at=now,
        ))

    if patterns.best_days:
        day_names = " & ".join(DAY_NAMES[d] for d in patterns.best_days)
        insights.append(Insight(
            type=InsightType.ENERGY_PATTERN,
            title="Best Days",
            message=f"{day_names} tend to be your most productive days. "
                    "Plan challenging tasks for these days!",
            emoji="📅",
            priority=2,
            generated_at=now,
        ))

    emoji, trend_message = TREND_MESSAGES[patterns.weekly_trend]
    insights.append(Insight(
        type=InsightType.ACHIEVEMENT,
        title="Weekly Trend",
        message=trend_message,
        emoji=emoji,
        priority=3,
        generated_at=now,
    ))

    has_easy_wins = any(not t.completed and t.energy == EnergyLevel.LOW for t in tasks)
    if current_energy == EnergyLevel.LOW and has_easy_wins:
        insights.append(Insight(
            type=InsightType.SUGGESTION,
            title="Low Energy Mode",
            message="I see you're low energy. I've got some easy wins queued up for you - "
                    "small victories still count!",
            emoji="🌙",
            priority=0,
            generated_at=now,
        ))

    if mood == MoodLevel.LOW:
        insights.append(Insight(
            type=InsightType.MOOD_CORRELATION,
            title="Feeling Down?",
            message="Low days happen. One tiny task can shift momentum. "
                    "What's the smallest thing you could do?",
            emoji="💙",
            priority=0,
            generated_at=now,
        ))

    total = patterns.total_completions
    if total > 0 and total % MILESTONE_EVERY == 0:
        insights.append(Insight(
            type=InsightType.ACHIEVEMENT,
            title="Milestone!",
            message=f"You've completed {total} tasks total! That's amazing progress! 🎉",
            emoji="🏆",
            priority=0,
            generated_at=now,
        ))

    if now.hour in patterns.peak_hours:
        insights.append(Insight(
            type=InsightType.SUGGESTION,
            title="Peak Time Now!",
            message="Right now is one of your peak productivity hours! "
                    "Perfect time for that challenging task.",
            emoji="🎯",
            priority=0,
            generated_at=now,
        ))

    return sorted(insights, key=lambda i: i.priority)


def generate_local_insight(patterns: PatternData, rng: random.Random | None = None) -> str:
    """One-line encouragement drawn from the pattern summary."""
    rng = rng or random.Random()
    first_peak = patterns.peak_hours[0] if patterns.peak_hours else 10
    if patterns.weekly_trend == WeeklyTrend.IMPROVING:
        trend_line = "You're on fire this week! 💪"
    else:
        trend_line = "Steady progress is still progress! 💪"

    return rng.choice([
        f"Your brain loves {first_peak}:00 - that's your superpower hour! ⚡",
        f"You've crushed {patterns.total_completions} tasks! Every single one counts. 🎯",
        trend_line,
        "Low energy? Your data shows you still get things done - just differently. 🌙",
    ])
