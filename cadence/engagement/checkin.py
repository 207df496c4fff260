"""
Tool: Check-In Scheduler
Purpose: Decide whether a proactive check-in should fire right now

Rules are evaluated in priority order; the first match wins:

    1. long_inactivity  inactive > 90 min during waking hours (8-22)
    2. peak_time        current hour is a peak hour and inactive > 30 min
    3. energy_dip       current hour is one of the 2 least productive working hours
    4. mood_based       mood is low and inactive > 20 min
    5. pattern_based    > 5 past completions at this hour and inactive > 45 min

Nothing fires while a delivered check-in from the last 30 minutes is still
unanswered, or when the user has switched check-ins off.

Usage:
    from cadence.engagement.checkin import CheckInScheduler

    scheduler = CheckInScheduler(rng=random.Random(42))
    check_in = scheduler.should_check_in(now, profile, completions, peak_hours, mood=mood)
    if check_in:
        scheduler.respond_to_check_in(check_in.id, "doing ok", now)
"""

import random
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from cadence.config_models import CheckInConfig
from cadence.engagement.messages import CHECK_IN_MESSAGES, pick_message
from cadence.engagement.models import CheckInType, ProactiveCheckIn, UserProfile
from cadence.history.models import CompletionRecord, MoodLevel
from cadence.logging_config import get_logger


logger = get_logger(__name__)

MORNING_CHECK_IN_HOUR = 9
AFTERNOON_DIP_TIME = (14, 30)


@dataclass(frozen=True)
class PlannedCheckIn:
    """A check-in planned for later today."""

    type: CheckInType
    time: datetime
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "time": self.time.isoformat(), "message": self.message}


# =============================================================================
# Pure rule evaluation
# =============================================================================


def get_energy_dip_hours(
    completions: Sequence[CompletionRecord], config: CheckInConfig | None = None
) -> list[int]:
    """
    Working hours with the fewest completions, lowest hour first on ties.

    Empty when there is no completion history to judge from.
    """
    config = config or CheckInConfig()
    if not completions:
        return []

    counts = Counter(c.hour for c in completions)
    working = range(config.working_hours_start, config.working_hours_end + 1)
    ranked = sorted(working, key=lambda h: counts[h])
    return ranked[: config.energy_dip_hour_count]


def evaluate_check_in_rules(
    hour: int,
    inactivity_minutes: float,
    peak_hours: Iterable[int],
    dip_hours: Iterable[int],
    mood: MoodLevel | None,
    completions_at_hour: int,
    config: CheckInConfig | None = None,
) -> CheckInType | None:
    """Apply the rule set and return the first matching check-in type."""
    config = config or CheckInConfig()

    waking = config.waking_start_hour <= hour <= config.waking_end_hour
    if inactivity_minutes > config.long_inactivity_minutes and waking:
        return CheckInType.LONG_INACTIVITY

    if hour in peak_hours and inactivity_minutes > config.peak_inactivity_minutes:
        return CheckInType.PEAK_TIME

    if hour in dip_hours:
        return CheckInType.ENERGY_DIP

    if mood == MoodLevel.LOW and inactivity_minutes > config.mood_inactivity_minutes:
        return CheckInType.MOOD_BASED

    if (
        completions_at_hour > config.pattern_min_completions
        and inactivity_minutes > config.pattern_inactivity_minutes
    ):
        return CheckInType.PATTERN_BASED

    return None


def is_in_cooldown(
    history: Iterable[ProactiveCheckIn], now: datetime, config: CheckInConfig | None = None
) -> bool:
    """True while a delivered, unanswered check-in is younger than the cooldown."""
    config = config or CheckInConfig()
    cooldown = timedelta(minutes=config.cooldown_minutes)
    return any(c.is_pending and now - c.scheduled_time < cooldown for c in history)


# =============================================================================
# Scheduler
# =============================================================================


class CheckInScheduler:
    """
    Holds configuration, the random source and the check-in log it owns.

    History passed to should_check_in is read per call and never cached.
    """

    def __init__(
        self,
        config: CheckInConfig | None = None,
        rng: random.Random | None = None,
        history: Iterable[ProactiveCheckIn] = (),
        last_activity_at: datetime | None = None,
    ):
        self.config = config or CheckInConfig()
        self.rng = rng or random.Random()
        self.history: list[ProactiveCheckIn] = list(history)
        self.last_activity_at = last_activity_at

    def record_activity(self, at: datetime) -> None:
        self.last_activity_at = at

    def inactivity_minutes(self, now: datetime, last_activity_at: datetime | None = None) -> float:
        """Minutes since the latest known activity; 0 when none is known."""
        stamps = [t for t in (self.last_activity_at, last_activity_at) if t is not None]
        if not stamps:
            return 0.0
        return max(0.0, (now - max(stamps)).total_seconds() / 60)

    def should_check_in(
        self,
        now: datetime,
        profile: UserProfile,
        completions: Sequence[CompletionRecord],
        peak_hours: Sequence[int],
        mood: MoodLevel | None = None,
        last_activity_at: datetime | None = None,
    ) -> ProactiveCheckIn | None:
        """
        Decide whether to check in now.

        Args:
            now: Current local time
            profile: User switches (check-ins may be disabled)
            completions: Completion snapshot
            peak_hours: Peak hours from the pattern analyzer
            mood: Current mood, if known
            last_activity_at: Latest activity seen in history, if any

        Returns:
            The created check-in, or None when no rule matches
        """
        if not profile.proactive_checkins_enabled:
            return None

        if is_in_cooldown(self.history, now, self.config):
            logger.debug("check_in_cooldown_active", user_id=profile.user_id)
            return None

        hour = now.hour
        check_in_type = evaluate_check_in_rules(
            hour=hour,
            inactivity_minutes=self.inactivity_minutes(now, last_activity_at),
            peak_hours=peak_hours,
            dip_hours=get_energy_dip_hours(completions, self.config),
            mood=mood,
            completions_at_hour=sum(1 for c in completions if c.hour == hour),
            config=self.config,
        )
        if check_in_type is None:
            return None

        return self._create_check_in(check_in_type, now)

    def _create_check_in(self, check_in_type: CheckInType, now: datetime) -> ProactiveCheckIn:
        check_in = ProactiveCheckIn(
            id=ProactiveCheckIn.generate_id(),
            type=check_in_type,
            message=pick_message(CHECK_IN_MESSAGES[check_in_type], self.rng),
            scheduled_time=now,
            delivered=True,
            responded=False,
        )
        self.history.append(check_in)
        logger.info("check_in_created", check_in_id=check_in.id, type=check_in_type.value)
        return check_in

    def respond_to_check_in(
        self, check_in_id: str, response: str, now: datetime
    ) -> ProactiveCheckIn | None:
        """Record the user's answer and reset the inactivity clock."""
        for check_in in self.history:
            if check_in.id == check_in_id:
                check_in.responded = True
                check_in.response = response
                self.record_activity(now)
                return check_in

        logger.warning("check_in_not_found", check_in_id=check_in_id)
        return None

    def get_scheduled_check_ins(
        self, now: datetime, peak_hours: Sequence[int]
    ) -> list[PlannedCheckIn]:
        """Morning check-in, afternoon dip and next peak hour still ahead today."""
        planned = []
        today = now.replace(minute=0, second=0, microsecond=0)

        if now.hour < MORNING_CHECK_IN_HOUR:
            planned.append(PlannedCheckIn(
                type=CheckInType.SCHEDULED,
                time=today.replace(hour=MORNING_CHECK_IN_HOUR),
                message=CHECK_IN_MESSAGES[CheckInType.SCHEDULED][0],
            ))

        dip_hour, dip_minute = AFTERNOON_DIP_TIME
        if now.hour < dip_hour:
            planned.append(PlannedCheckIn(
                type=CheckInType.ENERGY_DIP,
                time=today.replace(hour=dip_hour, minute=dip_minute),
                message=CHECK_IN_MESSAGES[CheckInType.ENERGY_DIP][0],
            ))

        for peak_hour in peak_hours:
            if now.hour < peak_hour:
                planned.append(PlannedCheckIn(
                    type=CheckInType.PEAK_TIME,
                    time=today.replace(hour=peak_hour),
                    message=CHECK_IN_MESSAGES[CheckInType.PEAK_TIME][0],
                ))
                break

        return sorted(planned, key=lambda p: p.time)

    def get_check_in_stats(self) -> dict[str, Any]:
        total = len(self.history)
        responded = sum(1 for c in self.history if c.responded)

        by_type: dict[CheckInType, list[int]] = {}
        for check_in in self.history:
            sent_answered = by_type.setdefault(check_in.type, [0, 0])
            sent_answered[0] += 1
            if check_in.responded:
                sent_answered[1] += 1

        most_effective = CheckInType.SCHEDULED
        best_rate = 0.0
        for check_in_type, (sent, answered) in by_type.items():
            rate = answered / sent
            if rate > best_rate:
                best_rate = rate
                most_effective = check_in_type

        return {
            "total_check_ins": total,
            "response_rate": responded / total if total else 0.0,
            "most_effective_type": most_effective.value,
        }
