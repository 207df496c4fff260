"""
Tool: Correlation Engine
Purpose: Linear correlation between mood, energy and productivity series

Two concrete uses:
- Mood <-> Energy: every mood entry that also carries an energy tag
- Mood <-> Productivity: mood value vs completions in the following 2 hours

Fewer than 5 paired samples is an insufficient-data condition and yields
exactly 0.0, not an error.

Usage:
    from cadence.learning.correlation import (
        mood_energy_correlation,
        mood_productivity_correlation,
        describe_correlation,
    )

    r = mood_productivity_correlation(snapshot.mood_entries, snapshot.completions)
    describe_correlation(r)  # CorrelationStrength.MODERATE_POSITIVE
"""

import math
from collections.abc import Sequence
from datetime import timedelta
from enum import Enum

from cadence.config_models import CorrelationConfig
from cadence.history.models import (
    ENERGY_WEIGHTS,
    MOOD_VALUES,
    CompletionRecord,
    MoodEntry,
)


class CorrelationStrength(str, Enum):
    STRONG_POSITIVE = "strong_positive"
    MODERATE_POSITIVE = "moderate_positive"
    NEUTRAL = "neutral"
    MODERATE_NEGATIVE = "moderate_negative"
    STRONG_NEGATIVE = "strong_negative"


def pearson(
    x: Sequence[float], y: Sequence[float], min_samples: int = 5
) -> float:
    """
    Pearson correlation coefficient of two equal-length series.

    Args:
        x: First series
        y: Second series, same length as x
        min_samples: Below this many pairs the result is 0.0

    Returns:
        Coefficient in [-1, 1]; 0.0 for too few samples or zero variance

    Raises:
        ValueError: If the series differ in length
    """
    if len(x) != len(y):
        raise ValueError(f"Series lengths differ: {len(x)} != {len(y)}")

    n = len(x)
    if n < min_samples:
        return 0.0

    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(a * b for a, b in zip(x, y))
    sum_x2 = sum(a * a for a in x)
    sum_y2 = sum(b * b for b in y)

    numerator = n * sum_xy - sum_x * sum_y
    variance = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if variance <= 0:
        return 0.0

    r = numerator / math.sqrt(variance)
    # Float error can push |r| a hair past 1
    return max(-1.0, min(1.0, r))


def mood_energy_correlation(
    mood_entries: Sequence[MoodEntry], config: CorrelationConfig | None = None
) -> float:
    """Correlate mood with the energy tag on the same entry."""
    config = config or CorrelationConfig()
    tagged = [m for m in mood_entries if m.energy is not None]
    moods = [MOOD_VALUES[m.mood] for m in tagged]
    energies = [ENERGY_WEIGHTS[m.energy] for m in tagged]
    return pearson(moods, energies, config.min_samples)


def completions_after(
    entry: MoodEntry, completions: Sequence[CompletionRecord], window: timedelta
) -> int:
    """Completions inside [entry time, entry time + window]."""
    end = entry.timestamp + window
    return sum(1 for c in completions if entry.timestamp <= c.completed_at <= end)


def mood_productivity_correlation(
    mood_entries: Sequence[MoodEntry],
    completions: Sequence[CompletionRecord],
    config: CorrelationConfig | None = None,
) -> float:
    """Correlate each mood reading with the completions that followed it."""
    config = config or CorrelationConfig()
    window = timedelta(hours=config.productivity_window_hours)

    moods = [MOOD_VALUES[m.mood] for m in mood_entries]
    counts = [completions_after(m, completions, window) for m in mood_entries]
    return pearson(moods, counts, config.min_samples)


def describe_correlation(r: float) -> CorrelationStrength:
    if r > 0.5:
        return CorrelationStrength.STRONG_POSITIVE
    if r > 0.2:
        return CorrelationStrength.MODERATE_POSITIVE
    if r > -0.2:
        return CorrelationStrength.NEUTRAL
    if r > -0.5:
        return CorrelationStrength.MODERATE_NEGATIVE
    return CorrelationStrength.STRONG_NEGATIVE
