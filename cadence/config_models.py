from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cadence import CONFIG_PATH
from cadence.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Pattern analysis
# =============================================================================

class PatternConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    peak_hour_count: int = Field(default=3, ge=1, le=24)
    default_peak_hours: list[int] = Field(default_factory=lambda: [9, 10, 11])
    best_day_count: int = Field(default=3, ge=1, le=7)
    default_best_days: list[int] = Field(default_factory=lambda: [1, 2, 3])
    trend_window_days: int = Field(default=7, ge=1)
    improving_ratio: float = Field(default=1.2, gt=1.0)
    declining_ratio: float = Field(default=0.8, gt=0.0, lt=1.0)

    @field_validator("default_peak_hours")
    @classmethod
    def _hours_in_range(cls, value: list[int]) -> list[int]:
        if any(h < 0 or h > 23 for h in value):
            raise ValueError("default_peak_hours must be within 0-23")
        return value

    @field_validator("default_best_days")
    @classmethod
    def _days_in_range(cls, value: list[int]) -> list[int]:
        if any(d < 0 or d > 6 for d in value):
            raise ValueError("default_best_days must be within 0-6")
        return value


class CorrelationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_samples: int = Field(default=5, ge=2)
    productivity_window_hours: float = Field(default=2.0, gt=0)
    recent_mood_hours: float = Field(default=2.0, gt=0)


# =============================================================================
# Suggestions
# =============================================================================

class SuggestionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    default_limit: int = Field(default=3, ge=1)
    calendar_window_minutes: int = Field(default=30, ge=1)
    high_activity_minutes: int = Field(default=15, ge=1)
    medium_activity_minutes: int = Field(default=60, ge=1)


# =============================================================================
# Engagement
# =============================================================================

class CheckInConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    cooldown_minutes: int = Field(default=30, ge=0)
    waking_start_hour: int = Field(default=8, ge=0, le=23)
    waking_end_hour: int = Field(default=22, ge=0, le=23)
    long_inactivity_minutes: int = Field(default=90, ge=1)
    peak_inactivity_minutes: int = Field(default=30, ge=1)
    mood_inactivity_minutes: int = Field(default=20, ge=1)
    pattern_inactivity_minutes: int = Field(default=45, ge=1)
    pattern_min_completions: int = Field(default=5, ge=0)
    working_hours_start: int = Field(default=6, ge=0, le=23)
    working_hours_end: int = Field(default=22, ge=0, le=23)
    energy_dip_hour_count: int = Field(default=2, ge=0)


class NudgeConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    lookback_days: int = Field(default=30, ge=1)
    first_hour: int = Field(default=6, ge=0, le=23)
    last_hour: int = Field(default=22, ge=0, le=23)
    focus_weight: float = Field(default=0.6, ge=0.0, le=1.0)
    energy_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    default_energy: float = Field(default=5.0, ge=1.0, le=10.0)
    high_energy_threshold: float = Field(default=7.0, ge=1.0, le=10.0)
    slot_count: int = Field(default=3, ge=1)
    afternoon_hour: int = Field(default=14, ge=0, le=23)
    default_repeat_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    fire_window_minutes: int = Field(default=5, ge=0)


class ThrottleConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    quiet_hours_start: int = Field(default=22, ge=0, le=23)
    quiet_hours_end: int = Field(default=7, ge=0, le=23)
    max_per_window: int = Field(default=3, ge=1)
    window_minutes: int = Field(default=60, ge=1)
    dismissal_window_minutes: int = Field(default=30, ge=1)
    max_dismissals: int = Field(default=2, ge=1)
    optimal_delay_max_minutes: int = Field(default=5, ge=0)
    delays_minutes: dict[str, list[int]] = Field(
        default_factory=lambda: {
            "gentle": [30, 45, 60, 90],
            "variable": [5, 12, 23, 37, 52, 73],
            "persistent": [15, 30, 45],
        }
    )


# =============================================================================
# Focus timer
# =============================================================================

class FocusTimerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    focus_minutes: int = Field(default=25, ge=1)
    short_break_minutes: int = Field(default=5, ge=1)
    long_break_minutes: int = Field(default=15, ge=1)
    pomodoros_until_long_break: int = Field(default=4, ge=1)
    auto_start_breaks: bool = Field(default=False)
    auto_start_next_pomodoro: bool = Field(default=False)


# =============================================================================
# Engine
# =============================================================================

class EngineConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    history_days: int = Field(default=90, ge=14)
    default_user_id: str = Field(default="default")


class CadenceConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    engine: EngineConfig = Field(default_factory=EngineConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    correlation: CorrelationConfig = Field(default_factory=CorrelationConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    check_ins: CheckInConfig = Field(default_factory=CheckInConfig)
    nudges: NudgeConfig = Field(default_factory=NudgeConfig)
    throttle: ThrottleConfig = Field(default_factory=ThrottleConfig)
    focus_timer: FocusTimerConfig = Field(default_factory=FocusTimerConfig)


# =============================================================================
# load_config
# =============================================================================

def load_config(path: Path | None = None) -> CadenceConfig:
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return CadenceConfig.model_validate(raw.get("cadence", raw))
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path.name}: {e}, using defaults")
        return CadenceConfig()
