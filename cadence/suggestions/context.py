"""
Tool: Context Builder
Purpose: Point-in-time situational snapshot used to score tasks

Usage:
    from cadence.suggestions.context import build_context

    context = build_context(
        now=datetime.now(),
        peak_hours=patterns.peak_hours,
        energy=EnergyLevel.MEDIUM,
        mood=None,
        last_activity_at=snapshot.last_activity_at,
        calendar_events=events,
    )
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from cadence.config_models import SuggestionConfig
from cadence.history.models import CalendarEvent, EnergyLevel, MoodLevel
from cadence.suggestions.models import (
    ActivityLevel,
    CalendarProximity,
    SuggestionContext,
    TimeOfDay,
)


def get_time_of_day(hour: int) -> TimeOfDay:
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def get_activity_level(
    now: datetime,
    last_activity_at: datetime | None,
    config: SuggestionConfig | None = None,
) -> ActivityLevel:
    """
    Classify how recently the user did something.

    An unknown last activity counts as "now": a fresh session starts the
    activity clock.
    """
    config = config or SuggestionConfig()
    if last_activity_at is None:
        return ActivityLevel.HIGH

    minutes_since = (now - last_activity_at).total_seconds() / 60
    if minutes_since < config.high_activity_minutes:
        return ActivityLevel.HIGH
    if minutes_since < config.medium_activity_minutes:
        return ActivityLevel.MEDIUM
    return ActivityLevel.LOW


def get_calendar_proximity(
    now: datetime,
    events: Iterable[CalendarEvent],
    config: SuggestionConfig | None = None,
) -> CalendarProximity:
    """
    Where the user sits relative to their calendar.

    An imminent event dominates: "busy_soon" wins over "just_finished"
    whenever both apply. An event in progress leaves the user "free".
    """
    config = config or SuggestionConfig()
    window = timedelta(minutes=config.calendar_window_minutes)
    just_finished = False

    for event in events:
        if now < event.start and event.start - now < window:
            return CalendarProximity.BUSY_SOON
        if event.end < now and now - event.end < window:
            just_finished = True

    return CalendarProximity.JUST_FINISHED if just_finished else CalendarProximity.FREE


def build_context(
    now: datetime,
    peak_hours: Sequence[int],
    energy: EnergyLevel | None = None,
    mood: MoodLevel | None = None,
    last_activity_at: datetime | None = None,
    calendar_events: Iterable[CalendarEvent] = (),
    config: SuggestionConfig | None = None,
) -> SuggestionContext:
    return SuggestionContext(
        time_of_day=get_time_of_day(now.hour),
        current_energy=energy,
        current_mood=mood,
        is_peak_hour=now.hour in peak_hours,
        recent_activity_level=get_activity_level(now, last_activity_at, config),
        calendar_proximity=get_calendar_proximity(now, calendar_events, config),
    )
