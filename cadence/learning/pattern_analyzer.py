"""
Tool: Pattern Analyzer
Purpose: Aggregate task completions into hourly and daily productivity patterns

Patterns emerge from observation over time. New users with no history get
a workable default (a morning window, early weekdays) rather than nothing.

Pattern outputs:
- hourly_stats: 24 buckets with completion count, average energy, success rate
- peak_hours: Up to 3 hours with the most completions
- best_days: Up to 3 weekdays with the most completions (0=Sunday)
- weekly_trend: This week vs last week (improving/stable/declining)

Usage:
    from cadence.learning.pattern_analyzer import analyze_patterns

    patterns = analyze_patterns(snapshot.completions, now=datetime.now())
    patterns.peak_hours  # [10, 14, 9]

Dependencies:
    - pydantic config models (cadence.config_models)
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from cadence.config_models import PatternConfig
from cadence.history.models import ENERGY_WEIGHTS, CompletionRecord, EnergyLevel
from cadence.logging_config import get_logger


logger = get_logger(__name__)

HOURS_IN_DAY = 24
DAYS_IN_WEEK = 7
DEFAULT_ENERGY_BEST_HOUR = 9

# Day name mapping (0=Sunday)
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class WeeklyTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


@dataclass(frozen=True)
class HourlyStat:
    hour: int
    completion_count: int
    average_energy: float
    success_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "hour": self.hour,
            "completion_count": self.completion_count,
            "average_energy": round(self.average_energy, 3),
            "success_rate": self.success_rate,
        }


@dataclass(frozen=True)
class EnergyPattern:
    """How completions are spread for one task energy level."""

    energy: EnergyLevel
    share: float
    best_hour: int

    def to_dict(self) -> dict[str, Any]:
        return {"energy": self.energy.value, "share": round(self.share, 3), "best_hour": self.best_hour}


@dataclass(frozen=True)
class PatternData:
    hourly_stats: list[HourlyStat]
    peak_hours: list[int]
    best_days: list[int]
    total_completions: int
    weekly_trend: WeeklyTrend
    completions_by_energy: dict[EnergyLevel, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hourly_stats": [s.to_dict() for s in self.hourly_stats],
            "peak_hours": list(self.peak_hours),
            "best_days": list(self.best_days),
            "best_day_names": [DAY_NAMES[d] for d in self.best_days],
            "total_completions": self.total_completions,
            "weekly_trend": self.weekly_trend.value,
            "completions_by_energy": {k.value: v for k, v in self.completions_by_energy.items()},
        }


# =============================================================================
# Aggregation
# =============================================================================


def get_hourly_stats(completions: Iterable[CompletionRecord]) -> list[HourlyStat]:
    """
    Bucket completions by hour of day.

    Returns:
        Exactly 24 HourlyStat entries, hour 0 first. The counts always sum
        to the number of records passed in.
    """
    counts = [0] * HOURS_IN_DAY
    energy_sums = [0] * HOURS_IN_DAY

    for record in completions:
        counts[record.hour] += 1
        energy_sums[record.hour] += ENERGY_WEIGHTS[record.energy]

    return [
        HourlyStat(
            hour=hour,
            completion_count=counts[hour],
            average_energy=energy_sums[hour] / counts[hour] if counts[hour] else 0.0,
            success_rate=1.0 if counts[hour] else 0.0,
        )
        for hour in range(HOURS_IN_DAY)
    ]


def _rank_buckets(counts: Counter, limit: int, defaults: Sequence[int]) -> list[int]:
    """Top buckets by count (ties: lower bucket first), padded from defaults."""
    ranked = sorted((b for b, c in counts.items() if c > 0), key=lambda b: (-counts[b], b))
    selected = ranked[:limit]

    for bucket in defaults:
        if len(selected) >= limit:
            break
        if bucket not in selected:
            selected.append(bucket)

    return selected


def get_peak_hours(
    completions: Iterable[CompletionRecord], config: PatternConfig | None = None
) -> list[int]:
    """Hours with the most completions, padded with the default morning window."""
    config = config or PatternConfig()
    counts = Counter(record.hour for record in completions)
    return _rank_buckets(counts, config.peak_hour_count, config.default_peak_hours)


def get_best_days(
    completions: Iterable[CompletionRecord], config: PatternConfig | None = None
) -> list[int]:
    """Days of week with the most completions, padded with default weekdays."""
    config = config or PatternConfig()
    counts = Counter(record.day_of_week for record in completions)
    return _rank_buckets(counts, config.best_day_count, config.default_best_days)


def get_weekly_trend(
    completions: Iterable[CompletionRecord],
    now: datetime,
    config: PatternConfig | None = None,
) -> WeeklyTrend:
    """
    Compare the trailing window to the one before it.

    A zero baseline is never "declining": any current activity counts as
    improving, none as stable.
    """
    config = config or PatternConfig()
    window = timedelta(days=config.trend_window_days)
    current_start = now - window
    previous_start = now - 2 * window

    current = previous = 0
    for record in completions:
        ts = record.completed_at
        if current_start < ts <= now:
            current += 1
        elif previous_start < ts <= current_start:
            previous += 1

    if previous == 0:
        return WeeklyTrend.IMPROVING if current > 0 else WeeklyTrend.STABLE

    ratio = current / previous
    if ratio > config.improving_ratio:
        return WeeklyTrend.IMPROVING
    if ratio < config.declining_ratio:
        return WeeklyTrend.DECLINING
    return WeeklyTrend.STABLE


def get_completions_by_energy(completions: Iterable[CompletionRecord]) -> dict[EnergyLevel, int]:
    counts = {level: 0 for level in EnergyLevel}
    for record in completions:
        counts[record.energy] += 1
    return counts


def get_energy_patterns(completions: Sequence[CompletionRecord]) -> list[EnergyPattern]:
    """Share of completions and most frequent hour for each energy level."""
    total = len(completions) or 1
    patterns = []

    for level in EnergyLevel:
        hours = Counter(r.hour for r in completions if r.energy == level)
        if hours:
            best_hour = min(hours, key=lambda h: (-hours[h], h))
        else:
            best_hour = DEFAULT_ENERGY_BEST_HOUR
        patterns.append(
            EnergyPattern(energy=level, share=sum(hours.values()) / total, best_hour=best_hour)
        )

    return patterns


def analyze_patterns(
    completions: Sequence[CompletionRecord],
    now: datetime,
    config: PatternConfig | None = None,
) -> PatternData:
    """
    Build the full pattern summary from a completion snapshot.

    Args:
        completions: Every completion in the snapshot
        now: Reference time for the weekly trend
        config: Pattern settings (defaults when omitted)

    Returns:
        PatternData rebuilt from scratch
    """
    config = config or PatternConfig()
    patterns = PatternData(
        hourly_stats=get_hourly_stats(completions),
        peak_hours=get_peak_hours(completions, config),
        best_days=get_best_days(completions, config),
        total_completions=len(completions),
        weekly_trend=get_weekly_trend(completions, now, config),
        completions_by_energy=get_completions_by_energy(completions),
    )

    logger.debug(
        "patterns_analyzed",
        total_completions=patterns.total_completions,
        peak_hours=patterns.peak_hours,
        weekly_trend=patterns.weekly_trend.value,
    )
    return patterns


def format_hour(hour: int) -> str:
    """12-hour clock label, e.g. 14 -> '2PM'."""
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}{suffix}"
