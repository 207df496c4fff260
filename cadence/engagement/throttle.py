"""
Tool: Notification Throttle
Purpose: Gate and time ad-hoc smart notifications

Smart notifications are separate from the fixed daily nudge schedule. A
notification is blocked when:
    1. Smart notifications are switched off
    2. The current hour is inside quiet hours (default 22:00-07:00)
    3. 3 notifications already fall in the trailing 60 minutes
    4. 2+ notifications from the last 30 minutes were dismissed without action

Low mood always downgrades delivery to the gentle style. The delay comes
from the style's distribution, compressed to 0-5 minutes during an optimal
hour (the hour before a peak hour).

Usage:
    from cadence.engagement.throttle import NotificationThrottle

    throttle = NotificationThrottle(sink=sink, rng=random.Random(3))
    entry = await throttle.schedule_smart_notification(
        now, profile, "Cadence", peak_hours, task_title="Reply to Sam", mood=mood
    )
"""

import random
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any

from cadence.config_models import ThrottleConfig
from cadence.engagement.messages import (
    LOW_MOOD_MESSAGES,
    NOTIFICATION_MESSAGES,
    PEAK_ENERGY_MESSAGES,
    pick_message,
)
from cadence.engagement.models import NotificationHistoryEntry, NotificationStyle, UserProfile
from cadence.engagement.sink import NotificationSink, deliver
from cadence.history.models import EnergyLevel, MoodLevel, generate_id
from cadence.logging_config import get_logger


logger = get_logger(__name__)

SMART_REMINDER_TYPE = "smart_reminder"
MIN_SAMPLES_PER_HOUR = 2
DEFAULT_BEST_HOUR = 9
DEFAULT_WORST_HOUR = 14


# =============================================================================
# Pure checks
# =============================================================================


def is_quiet_hours(hour: int, start: int, end: int) -> bool:
    """
    Check whether an hour falls inside quiet hours.

    Handles ranges that wrap past midnight (e.g. 22 -> 7). Equal start and
    end means no quiet hours.
    """
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end


def check_rate_limit(
    history: Iterable[NotificationHistoryEntry],
    now: datetime,
    config: ThrottleConfig | None = None,
) -> dict[str, Any]:
    """
    Count notifications in the trailing window.

    Entries scheduled for later (sent_at in the future) count too, so a
    burst of scheduling cannot exceed the limit.

    Returns:
        {
            "allowed": bool,
            "count": int,
            "reset_at": datetime | None,
        }
    """
    config = config or ThrottleConfig()
    window = timedelta(minutes=config.window_minutes)
    recent = [e.sent_at for e in history if e.sent_at > now - window]

    allowed = len(recent) < config.max_per_window
    return {
        "allowed": allowed,
        "count": len(recent),
        "reset_at": None if allowed else min(recent) + window,
    }


def check_dismissal_fatigue(
    history: Iterable[NotificationHistoryEntry],
    now: datetime,
    config: ThrottleConfig | None = None,
) -> dict[str, Any]:
    config = config or ThrottleConfig()
    window = timedelta(minutes=config.dismissal_window_minutes)
    dismissed = [
        e for e in history if e.dismissed_without_action and e.sent_at > now - window
    ]
    return {
        "fatigued": len(dismissed) >= config.max_dismissals,
        "dismissed_count": len(dismissed),
    }


def get_optimal_notification_hours(peak_hours: Iterable[int]) -> list[int]:
    """One hour before each peak hour (midnight wraps to 23)."""
    return [h - 1 if h > 0 else 23 for h in peak_hours]


def effective_style(style: NotificationStyle, mood: MoodLevel | None) -> NotificationStyle:
    if mood == MoodLevel.LOW:
        return NotificationStyle.GENTLE
    return style


def get_optimal_delay(
    hour: int,
    optimal_hours: Iterable[int],
    style: NotificationStyle,
    rng: random.Random,
    config: ThrottleConfig | None = None,
) -> timedelta:
    """Pick a delivery delay for the style, or 0-5 minutes in an optimal hour."""
    config = config or ThrottleConfig()
    if hour in optimal_hours:
        return timedelta(minutes=rng.uniform(0, config.optimal_delay_max_minutes))

    delays = config.delays_minutes.get(style.value) or config.delays_minutes["gentle"]
    return timedelta(minutes=rng.choice(delays))


# =============================================================================
# Throttle
# =============================================================================


class NotificationThrottle:
    """
    Holds configuration, the random source and the notification audit log.

    The log is append-only apart from response recording.
    """

    def __init__(
        self,
        config: ThrottleConfig | None = None,
        rng: random.Random | None = None,
        history: Iterable[NotificationHistoryEntry] = (),
        sink: NotificationSink | None = None,
    ):
        self.config = config or ThrottleConfig()
        self.rng = rng or random.Random()
        self.history: list[NotificationHistoryEntry] = list(history)
        self.sink = sink

    def can_send_now(
        self, now: datetime, profile: UserProfile, mood: MoodLevel | None = None
    ) -> dict[str, Any]:
        """
        Check if an ad-hoc notification may go out right now.

        Returns:
            {
                "can_send": bool,
                "reason": str | None,
                "retry_at": datetime | None,
                "style": NotificationStyle,
            }
        """
        style = effective_style(profile.notification_style, mood)

        def blocked(reason: str, retry_at: datetime | None = None) -> dict[str, Any]:
            return {"can_send": False, "reason": reason, "retry_at": retry_at, "style": style}

        if not profile.smart_notifications_enabled:
            return blocked("notifications_disabled")

        if is_quiet_hours(now.hour, self.config.quiet_hours_start, self.config.quiet_hours_end):
            return blocked("quiet_hours")

        rate_check = check_rate_limit(self.history, now, self.config)
        if not rate_check["allowed"]:
            return blocked("rate_limit", rate_check["reset_at"])

        if check_dismissal_fatigue(self.history, now, self.config)["fatigued"]:
            return blocked("dismissal_fatigue")

        return {"can_send": True, "reason": None, "retry_at": None, "style": style}

    def should_send_notification(
        self, now: datetime, profile: UserProfile, mood: MoodLevel | None = None
    ) -> bool:
        return self.can_send_now(now, profile, mood)["can_send"]

    def get_smart_message(
        self,
        now: datetime,
        style: NotificationStyle,
        peak_hours: Sequence[int],
        task_title: str | None = None,
        energy: EnergyLevel | None = None,
        mood: MoodLevel | None = None,
    ) -> str:
        message = pick_message(NOTIFICATION_MESSAGES[style], self.rng)

        if mood == MoodLevel.LOW:
            message = pick_message(LOW_MOOD_MESSAGES, self.rng)

        if energy == EnergyLevel.HIGH and now.hour in peak_hours:
            message = pick_message(PEAK_ENERGY_MESSAGES, self.rng)

        if task_title:
            message += f" Task: {task_title}"

        return message

    async def schedule_smart_notification(
        self,
        now: datetime,
        profile: UserProfile,
        title: str,
        peak_hours: Sequence[int],
        task_title: str | None = None,
        energy: EnergyLevel | None = None,
        mood: MoodLevel | None = None,
    ) -> NotificationHistoryEntry | None:
        """
        Gate, time and hand a smart notification to the sink.

        Returns:
            The recorded history entry, or None if blocked or delivery failed
        """
        check = self.can_send_now(now, profile, mood)
        if not check["can_send"]:
            logger.info("smart_notification_blocked", user_id=profile.user_id,
                        reason=check["reason"])
            return None

        style = check["style"]
        delay = get_optimal_delay(
            now.hour, get_optimal_notification_hours(peak_hours), style, self.rng, self.config
        )
        body = self.get_smart_message(now, style, peak_hours, task_title, energy, mood)
        send_at = now + delay

        notification_id = None
        if self.sink is not None:
            notification_id = await deliver(self.sink, SMART_REMINDER_TYPE, title, body, send_at)
            if notification_id is None:
                return None

        entry = NotificationHistoryEntry(
            id=notification_id or generate_id("ntf"),
            type=SMART_REMINDER_TYPE,
            sent_at=send_at,
        )
        self.history.append(entry)
        logger.info("smart_notification_scheduled", notification_id=entry.id,
                    style=style.value, delay_minutes=round(delay.total_seconds() / 60, 1))
        return entry

    def record_notification_response(
        self, notification_id: str, action_taken: bool, now: datetime
    ) -> NotificationHistoryEntry | None:
        for entry in self.history:
            if entry.id == notification_id:
                entry.acknowledged_at = now
                entry.dismissed = not action_taken
                entry.action_taken = action_taken
                return entry

        logger.warning("notification_not_found", notification_id=notification_id)
        return None

    def get_notification_effectiveness(self) -> dict[str, Any]:
        """Overall action rate plus best and worst hours (needs > 2 samples per hour)."""
        total = len(self.history)
        actioned = sum(1 for e in self.history if e.action_taken)

        by_hour: dict[int, list[int]] = {}
        for entry in self.history:
            sent_actioned = by_hour.setdefault(entry.sent_at.hour, [0, 0])
            sent_actioned[0] += 1
            if entry.action_taken:
                sent_actioned[1] += 1

        best_hour, worst_hour = DEFAULT_BEST_HOUR, DEFAULT_WORST_HOUR
        best_rate, worst_rate = 0.0, 1.0
        for hour in sorted(by_hour):
            sent, hour_actioned = by_hour[hour]
            if sent <= MIN_SAMPLES_PER_HOUR:
                continue
            rate = hour_actioned / sent
            if rate > best_rate:
                best_rate, best_hour = rate, hour
            if rate < worst_rate:
                worst_rate, worst_hour = rate, hour

        return {
            "total_sent": total,
            "action_rate": actioned / total if total else 0.0,
            "best_hour": best_hour,
            "worst_hour": worst_hour,
        }

    async def clear_all(self) -> None:
        """Cancel everything pending in the sink."""
        if self.sink is not None:
            await self.sink.cancel_all()
