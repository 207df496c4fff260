"""
Tool: Cadence Engine
Purpose: Wire history, analysis and engagement together for one user

Data flow:
    HistoryStore -> snapshot -> patterns / correlations -> context -> suggestions
                                                        -> check-in decision
    HistoryStore -> snapshot -> optimal slots -> nudge schedule -> store + sink
    NotificationThrottle gates ad-hoc smart notifications

The engine never polls. Callers ingest new history, then call refresh().
Everything derived is recomputed from the current snapshot on each call.

Usage:
    from cadence.engine import CadenceEngine

    engine = CadenceEngine("alice", SQLiteHistoryStore("alice"), sink=my_sink)
    await engine.refresh(now)
    suggestions = engine.suggest(tasks, now, energy=EnergyLevel.LOW)
    check_in = await engine.check_in(now, mood=MoodLevel.LOW)
"""

import random
import sqlite3
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Any

from cadence.config_models import CadenceConfig, load_config
from cadence.engagement import store as engagement_store
from cadence.engagement.checkin import CheckInScheduler
from cadence.engagement.models import (
    NotificationHistoryEntry,
    OptimalTimeSlot,
    ProactiveCheckIn,
    ScheduledNudge,
    UserProfile,
)
from cadence.engagement.nudges import (
    find_optimal_time_slots,
    generate_recommended_nudges,
    next_fire_time,
    recommended_nudge_ids,
    should_fire_nudge,
)
from cadence.engagement.sink import NotificationSink, deliver
from cadence.engagement.throttle import NotificationThrottle
from cadence.history.models import (
    CalendarEvent,
    EnergyLevel,
    HistorySnapshot,
    MoodLevel,
    Task,
)
from cadence.history.store import HistoryStore, load_snapshot
from cadence.learning.correlation import (
    describe_correlation,
    mood_energy_correlation,
    mood_productivity_correlation,
)
from cadence.learning.insights import Insight, generate_insights
from cadence.learning.mood_tracker import MoodPattern, build_mood_pattern, get_recent_mood
from cadence.learning.pattern_analyzer import PatternData, analyze_patterns
from cadence.learning.weekly_report import WeeklyReport, generate_weekly_report
from cadence.logging_config import bind_user, get_logger
from cadence.suggestions.context import build_context
from cadence.suggestions.models import SuggestionContext, TaskSuggestion
from cadence.suggestions.scorer import get_suggestions


logger = get_logger(__name__)

NOTIFICATION_TITLE = "Cadence"


class CadenceEngine:
    """
    Per-user facade.

    Holds configuration, the injected random source, the latest history
    snapshot and the two engagement logs (check-ins, notifications).
    """

    def __init__(
        self,
        user_id: str,
        history_store: HistoryStore,
        sink: NotificationSink | None = None,
        config: CadenceConfig | None = None,
        rng: random.Random | None = None,
        profile: UserProfile | None = None,
    ):
        self.user_id = user_id
        self.history_store = history_store
        self.sink = sink
        self.config = config or load_config()
        self.rng = rng or random.Random()
        self.profile = profile or UserProfile(user_id=user_id)

        self.snapshot = HistorySnapshot()
        self.check_ins = CheckInScheduler(self.config.check_ins, self.rng)
        self.throttle = NotificationThrottle(self.config.throttle, self.rng, sink=sink)
        # recommended nudge id -> sink id
        self.nudge_sink_ids: dict[str, str] = {}

    # =========================================================================
    # Snapshot
    # =========================================================================

    async def refresh(self, now: datetime) -> HistorySnapshot | None:
        """
        Reload history and engagement logs.

        On a store failure the previous snapshot is kept and None returned.
        """
        bind_user(self.user_id)
        start = now - timedelta(days=self.config.engine.history_days)
        try:
            snapshot = await load_snapshot(self.history_store, start, now)
        except sqlite3.Error as e:
            logger.error("history_refresh_failed", error=str(e))
            return None

        self.snapshot = snapshot
        self.check_ins.history = await engagement_store.list_check_ins(self.user_id)
        self.throttle.history = await engagement_store.list_notifications(self.user_id)

        logger.info(
            "snapshot_refreshed",
            completions=len(snapshot.completions),
            energy_logs=len(snapshot.energy_logs),
            mood_entries=len(snapshot.mood_entries),
            focus_sessions=len(snapshot.focus_sessions),
        )
        return snapshot

    # =========================================================================
    # Analysis
    # =========================================================================

    def patterns(self, now: datetime) -> PatternData:
        return analyze_patterns(self.snapshot.completions, now, self.config.patterns)

    def correlations(self) -> dict[str, Any]:
        mood_energy = mood_energy_correlation(self.snapshot.mood_entries, self.config.correlation)
        mood_productivity = mood_productivity_correlation(
            self.snapshot.mood_entries, self.snapshot.completions, self.config.correlation
        )
        return {
            "mood_energy": {
                "coefficient": mood_energy,
                "strength": describe_correlation(mood_energy).value,
            },
            "mood_productivity": {
                "coefficient": mood_productivity,
                "strength": describe_correlation(mood_productivity).value,
            },
        }

    def mood_pattern(self) -> MoodPattern:
        return build_mood_pattern(
            self.snapshot.mood_entries, self.snapshot.completions, self.config.correlation
        )

    def current_mood(self, now: datetime) -> MoodLevel | None:
        return get_recent_mood(self.snapshot.mood_entries, now, self.config.correlation)

    def insights(
        self,
        now: datetime,
        energy: EnergyLevel | None = None,
        tasks: Sequence[Task] = (),
        mood: MoodLevel | None = None,
    ) -> list[Insight]:
        return generate_insights(self.patterns(now), now, energy, tasks, mood)

    async def weekly_report(self, now: datetime) -> WeeklyReport:
        return await generate_weekly_report(self.history_store, now)

    # =========================================================================
    # Suggestions
    # =========================================================================

    def context(
        self,
        now: datetime,
        energy: EnergyLevel | None = None,
        mood: MoodLevel | None = None,
        calendar_events: Iterable[CalendarEvent] = (),
    ) -> SuggestionContext:
        return build_context(
            now=now,
            peak_hours=self.patterns(now).peak_hours,
            energy=energy,
            mood=mood,
            last_activity_at=self._last_activity_at(),
            calendar_events=calendar_events,
            config=self.config.suggestions,
        )

    def suggest(
        self,
        tasks: Sequence[Task],
        now: datetime,
        energy: EnergyLevel | None = None,
        mood: MoodLevel | None = None,
        calendar_events: Iterable[CalendarEvent] = (),
        limit: int | None = None,
    ) -> list[TaskSuggestion]:
        context = self.context(now, energy, mood, calendar_events)
        return get_suggestions(
            tasks, context, now, limit or self.config.suggestions.default_limit
        )

    # =========================================================================
    # Check-ins
    # =========================================================================

    def _last_activity_at(self) -> datetime | None:
        stamps = [
            t for t in (self.snapshot.last_activity_at, self.check_ins.last_activity_at) if t
        ]
        return max(stamps) if stamps else None

    async def check_in(
        self, now: datetime, mood: MoodLevel | None = None
    ) -> ProactiveCheckIn | None:
        """Decide on a proactive check-in and persist it when one fires."""
        check_in = self.check_ins.should_check_in(
            now=now,
            profile=self.profile,
            completions=self.snapshot.completions,
            peak_hours=self.patterns(now).peak_hours,
            mood=mood if mood is not None else self.current_mood(now),
            last_activity_at=self.snapshot.last_activity_at,
        )
        if check_in is not None:
            await engagement_store.save_check_in(self.user_id, check_in)
        return check_in

    async def respond_to_check_in(
        self, check_in_id: str, response: str, now: datetime
    ) -> ProactiveCheckIn | None:
        check_in = self.check_ins.respond_to_check_in(check_in_id, response, now)
        if check_in is not None:
            await engagement_store.save_check_in(self.user_id, check_in)
        return check_in

    # =========================================================================
    # Nudges
    # =========================================================================

    def optimal_slots(self, now: datetime) -> list[OptimalTimeSlot]:
        return find_optimal_time_slots(
            self.snapshot.focus_sessions, self.snapshot.energy_logs, now, self.config.nudges
        )

    async def recommend_nudges(self, now: datetime, schedule: bool = True) -> list[ScheduledNudge]:
        """
        Build the recommended schedule, persist it and hand it to the sink.

        The new set replaces the previous recommendation: nudges keep their
        ids and enabled flag, recommendations that no longer apply are deleted
        and earlier sink requests are cancelled before scheduling again.
        Nudges that fail to persist or schedule are logged; the rest go through.
        """
        nudges = generate_recommended_nudges(
            self.optimal_slots(now), self.user_id, self.config.nudges
        )

        recommended_ids = recommended_nudge_ids(self.user_id)
        previous = {
            n.id: n for n in await engagement_store.list_nudges(self.user_id)
            if n.id in recommended_ids
        }
        for stale_id in previous.keys() - {n.id for n in nudges}:
            await engagement_store.delete_nudge(self.user_id, stale_id)
            await self._cancel_nudge_delivery(stale_id)

        for nudge in nudges:
            if nudge.id in previous:
                nudge.enabled = previous[nudge.id].enabled
            await engagement_store.save_nudge(nudge)
            await self._cancel_nudge_delivery(nudge.id)
            if not schedule or self.sink is None or not nudge.enabled:
                continue
            fire_at = next_fire_time(nudge, now)
            if fire_at is not None:
                sink_id = await deliver(
                    self.sink, nudge.type.value, NOTIFICATION_TITLE, nudge.message,
                    fire_at, repeat=nudge.repeat_days,
                )
                if sink_id is not None:
                    self.nudge_sink_ids[nudge.id] = sink_id

        logger.info("nudges_recommended", count=len(nudges), replaced=len(previous))
        return nudges

    async def _cancel_nudge_delivery(self, nudge_id: str) -> None:
        sink_id = self.nudge_sink_ids.pop(nudge_id, None)
        if sink_id is None or self.sink is None:
            return
        try:
            await self.sink.cancel(sink_id)
        except Exception as e:
            logger.error("nudge_cancel_failed", nudge_id=nudge_id, error=str(e))

    async def due_nudges(self, now: datetime) -> list[ScheduledNudge]:
        nudges = await engagement_store.list_nudges(self.user_id, enabled_only=True)
        return [n for n in nudges if should_fire_nudge(n, now, self.config.nudges)]

    # =========================================================================
    # Smart notifications
    # =========================================================================

    async def smart_notification(
        self,
        now: datetime,
        task_title: str | None = None,
        energy: EnergyLevel | None = None,
        mood: MoodLevel | None = None,
    ) -> NotificationHistoryEntry | None:
        entry = await self.throttle.schedule_smart_notification(
            now,
            self.profile,
            NOTIFICATION_TITLE,
            self.patterns(now).peak_hours,
            task_title=task_title,
            energy=energy,
            mood=mood if mood is not None else self.current_mood(now),
        )
        if entry is not None:
            await engagement_store.save_notification(self.user_id, entry)
        return entry

    async def record_notification_response(
        self, notification_id: str, action_taken: bool, now: datetime
    ) -> NotificationHistoryEntry | None:
        entry = self.throttle.record_notification_response(notification_id, action_taken, now)
        if entry is not None:
            await engagement_store.save_notification(self.user_id, entry)
        return entry
