"""
Tool: Mood Tracker
Purpose: Mood patterns over time and their link to productivity

Usage:
    from cadence.learning.mood_tracker import build_mood_pattern, get_mood_insight

    pattern = build_mood_pattern(snapshot.mood_entries, snapshot.completions)
    insight = get_mood_insight(pattern, rng=random.Random(7))
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from cadence.config_models import CorrelationConfig
from cadence.history.models import (
    MOOD_VALUES,
    CompletionRecord,
    MoodEntry,
    MoodLevel,
    day_of_week,
)
from cadence.learning.correlation import mood_energy_correlation, mood_productivity_correlation
from cadence.learning.pattern_analyzer import format_hour


NEUTRAL_MOOD_VALUE = 2.0
LOW_MOOD_THRESHOLD = 1.5
HIGH_MOOD_THRESHOLD = 2.5
INACTIVITY_GAP = timedelta(hours=4)
COMPLETION_LOOKBACK = timedelta(hours=1)

FALLBACK_INSIGHT = "Keep tracking your mood to discover patterns! More data = better insights."


@dataclass(frozen=True)
class MoodPattern:
    average_mood_by_hour: dict[int, float]
    average_mood_by_day: dict[int, float]
    mood_energy_correlation: float
    mood_productivity_correlation: float
    low_mood_triggers: list[str] = field(default_factory=list)
    high_mood_triggers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_mood_by_hour": dict(self.average_mood_by_hour),
            "average_mood_by_day": dict(self.average_mood_by_day),
            "mood_energy_correlation": round(self.mood_energy_correlation, 4),
            "mood_productivity_correlation": round(self.mood_productivity_correlation, 4),
            "low_mood_triggers": list(self.low_mood_triggers),
            "high_mood_triggers": list(self.high_mood_triggers),
        }


def get_recent_mood(
    mood_entries: Sequence[MoodEntry],
    now: datetime,
    config: CorrelationConfig | None = None,
) -> MoodLevel | None:
    """Latest mood logged within the recent window, or None."""
    config = config or CorrelationConfig()
    cutoff = now - timedelta(hours=config.recent_mood_hours)
    recent = [m for m in mood_entries if cutoff < m.timestamp <= now]
    if not recent:
        return None
    return max(recent, key=lambda m: m.timestamp).mood


def _averages(buckets: range, mood_entries: Sequence[MoodEntry], key) -> dict[int, float]:
    sums = {b: 0 for b in buckets}
    counts = {b: 0 for b in buckets}
    for entry in mood_entries:
        bucket = key(entry)
        sums[bucket] += MOOD_VALUES[entry.mood]
        counts[bucket] += 1
    return {b: sums[b] / counts[b] if counts[b] else NEUTRAL_MOOD_VALUE for b in buckets}


def average_mood_by_hour(mood_entries: Sequence[MoodEntry]) -> dict[int, float]:
    return _averages(range(24), mood_entries, lambda m: m.timestamp.hour)


def average_mood_by_day(mood_entries: Sequence[MoodEntry]) -> dict[int, float]:
    return _averages(range(7), mood_entries, lambda m: day_of_week(m.timestamp))


def identify_low_mood_triggers(mood_entries: Sequence[MoodEntry]) -> list[str]:
    triggers = []

    hourly = average_mood_by_hour(mood_entries)
    low_hours = [h for h, avg in hourly.items() if avg < LOW_MOOD_THRESHOLD]
    if low_hours:
        triggers.append(f"Low mood common around: {', '.join(format_hour(h) for h in low_hours)}")

    ordered = sorted(mood_entries, key=lambda m: m.timestamp)
    after_gap = [
        entry
        for prev, entry in zip(ordered, ordered[1:])
        if entry.mood == MoodLevel.LOW and entry.timestamp - prev.timestamp > INACTIVITY_GAP
    ]
    if len(after_gap) > 2:
        triggers.append("Mood often drops after long periods of inactivity")

    return triggers


def identify_high_mood_triggers(
    mood_entries: Sequence[MoodEntry], completions: Sequence[CompletionRecord]
) -> list[str]:
    triggers = []

    after_completion = [
        entry
        for entry in mood_entries
        if entry.mood == MoodLevel.HIGH
        and any(
            entry.timestamp - COMPLETION_LOOKBACK < c.completed_at < entry.timestamp
            for c in completions
        )
    ]
    if len(after_completion) > 3:
        triggers.append("Mood improves after completing tasks")

    hourly = average_mood_by_hour(mood_entries)
    high_hours = [h for h, avg in hourly.items() if avg > HIGH_MOOD_THRESHOLD]
    if high_hours:
        triggers.append(f"Best mood hours: {', '.join(format_hour(h) for h in high_hours)}")

    return triggers


def build_mood_pattern(
    mood_entries: Sequence[MoodEntry],
    completions: Sequence[CompletionRecord],
    config: CorrelationConfig | None = None,
) -> MoodPattern:
    return MoodPattern(
        average_mood_by_hour=average_mood_by_hour(mood_entries),
        average_mood_by_day=average_mood_by_day(mood_entries),
        mood_energy_correlation=mood_energy_correlation(mood_entries, config),
        mood_productivity_correlation=mood_productivity_correlation(
            mood_entries, completions, config
        ),
        low_mood_triggers=identify_low_mood_triggers(mood_entries),
        high_mood_triggers=identify_high_mood_triggers(mood_entries, completions),
    )


def get_mood_insight(pattern: MoodPattern, rng: random.Random | None = None) -> str:
    """Pick one applicable mood insight at random."""
    rng = rng or random.Random()
    insights = []

    if pattern.mood_productivity_correlation > 0.5:
        insights.append(
            "Your mood and productivity are strongly connected - completing tasks boosts your mood!"
        )
    elif pattern.mood_productivity_correlation < -0.3:
        insights.append(
            "Interestingly, you're productive even when mood is lower. You're resilient!"
        )

    if pattern.mood_energy_correlation > 0.5:
        insights.append(
            "Your mood tracks closely with energy - taking care of physical energy helps mental state."
        )

    if pattern.high_mood_triggers:
        insights.append(pattern.high_mood_triggers[0])

    if not insights:
        return FALLBACK_INSIGHT
    return rng.choice(insights)


def get_days_tracked(mood_entries: Sequence[MoodEntry]) -> int:
    return len({m.timestamp.date() for m in mood_entries})
