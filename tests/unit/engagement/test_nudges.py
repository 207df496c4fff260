"""Tests for cadence/engagement/nudges.py

A user with no history still gets three slots, at the earliest hours and
with the confidence the default energy alone earns.
"""

from datetime import datetime, timedelta

import pytest

from cadence.engagement.messages import NUDGE_MESSAGES
from cadence.engagement.models import (
    NotificationHistoryEntry,
    NudgeType,
    OptimalTimeSlot,
    ScheduledNudge,
)
from cadence.engagement.nudges import (
    find_optimal_time_slots,
    generate_recommended_nudges,
    get_best_days,
    next_fire_time,
    pick_quick_task,
    recommended_nudge_ids,
    round_half_up,
    should_fire_nudge,
    summarize_nudge_effectiveness,
)


def _nudge(time="10:00", enabled=True, repeat_days=None):
    return ScheduledNudge(
        id="nudge_focus_1",
        user_id="u1",
        scheduled_time=time,
        type=NudgeType.FOCUS_REMINDER,
        message="Focus?",
        enabled=enabled,
        repeat_days=[1, 2, 3, 4, 5] if repeat_days is None else repeat_days,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Optimal Time Slots
# ─────────────────────────────────────────────────────────────────────────────


class TestFindOptimalTimeSlots:
    """Tests for find_optimal_time_slots."""

    def test_no_history_gives_three_default_slots(self, now):
        slots = find_optimal_time_slots([], [], now)

        assert [s.hour for s in slots] == [6, 7, 8]
        assert all(s.confidence == 40 for s in slots)
        assert all(s.reason == "Based on typical patterns for your schedule" for s in slots)
        assert all(s.best_days_of_week == [] for s in slots)

    def test_focus_history_dominates(self, make_focus_session, now):
        sessions = [
            make_focus_session(now.replace(hour=9) - timedelta(days=d), minutes=25)
            for d in range(4)
        ]

        slots = find_optimal_time_slots(sessions, [], now)

        assert slots[0].hour == 9
        assert slots[0].confidence == 100
        assert slots[0].reason == "You've successfully focused here 4 times"
        # Sessions fell on Wednesday, Tuesday, Monday and Sunday
        assert slots[0].best_days_of_week == [0, 1, 2, 3]

    def test_energy_only_history(self, make_energy, now):
        logs = [make_energy(now.replace(hour=15) - timedelta(days=1), level=9)]

        slots = find_optimal_time_slots([], logs, now)

        assert [s.hour for s in slots] == [15, 6, 7]
        assert slots[0].confidence == 40
        assert slots[0].reason == "Your energy tends to be high around this time"
        assert slots[1].confidence == 22

    def test_combined_reason(self, make_focus_session, make_energy, now):
        sessions = [make_focus_session(now.replace(hour=11) - timedelta(days=1), minutes=40)]
        logs = [make_energy(now.replace(hour=11) - timedelta(days=1), level=5)]

        slot = find_optimal_time_slots(sessions, logs, now)[0]

        assert slot.hour == 11
        assert slot.reason == "You've had 40 minutes of focus here with steady energy"

    def test_history_outside_lookback_ignored(self, make_focus_session, now):
        sessions = [make_focus_session(now.replace(hour=20) - timedelta(days=45), minutes=300)]

        assert [s.hour for s in find_optimal_time_slots(sessions, [], now)] == [6, 7, 8]

    def test_best_days_limit_and_order(self):
        focus = {0: 10.0, 1: 50.0, 2: 50.0, 3: 5.0, 4: 0.0, 5: 20.0, 6: 30.0}
        assert get_best_days(focus) == [1, 2, 6, 5, 0]

    @pytest.mark.parametrize("value,expected", [(22.5, 23), (22.49, 22), (0.5, 1)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


# ─────────────────────────────────────────────────────────────────────────────
# Recommended Nudges
# ─────────────────────────────────────────────────────────────────────────────


class TestGenerateRecommendedNudges:
    def test_builds_focus_energy_and_afternoon(self):
        slots = [
            OptimalTimeSlot(hour=9, confidence=90, reason="", best_days_of_week=[1, 3]),
            OptimalTimeSlot(hour=11, confidence=70, reason=""),
            OptimalTimeSlot(hour=16, confidence=50, reason=""),
        ]

        nudges = generate_recommended_nudges(slots, user_id="alice")

        assert [(n.scheduled_time, n.type) for n in nudges] == [
            ("09:00", NudgeType.FOCUS_REMINDER),
            ("11:00", NudgeType.ENERGY_CHECK),
            ("14:00", NudgeType.TASK_SUGGESTION),
        ]
        assert nudges[0].repeat_days == [1, 3]
        assert nudges[1].repeat_days == [1, 2, 3, 4, 5]
        assert nudges[2].message == NUDGE_MESSAGES["task_suggestion"]
        assert all(n.user_id == "alice" and n.enabled for n in nudges)

    def test_no_slots_still_suggests_afternoon(self):
        nudges = generate_recommended_nudges([], user_id="alice")
        assert [n.type for n in nudges] == [NudgeType.TASK_SUGGESTION]

    def test_ids_are_stable_per_user(self):
        slots = [OptimalTimeSlot(hour=9, confidence=90, reason="")]

        first = generate_recommended_nudges(slots, user_id="alice")
        second = generate_recommended_nudges(slots, user_id="alice")
        other = generate_recommended_nudges(slots, user_id="bob")

        assert [n.id for n in first] == ["nudge_focus_alice", "nudge_afternoon_alice"]
        assert [n.id for n in second] == [n.id for n in first]
        assert {n.id for n in first} <= recommended_nudge_ids("alice")
        assert not {n.id for n in other} & recommended_nudge_ids("alice")


# ─────────────────────────────────────────────────────────────────────────────
# Firing
# ─────────────────────────────────────────────────────────────────────────────


class TestShouldFireNudge:
    """Tests for should_fire_nudge (now is Wednesday 10:00)."""

    @pytest.mark.parametrize("time,expected", [
        ("10:00", True),
        ("10:05", True),
        ("09:55", True),
        ("10:06", False),
        ("09:54", False),
    ])
    def test_fire_window(self, now, time, expected):
        assert should_fire_nudge(_nudge(time), now) is expected

    def test_disabled_never_fires(self, now):
        assert should_fire_nudge(_nudge(enabled=False), now) is False

    def test_wrong_day_does_not_fire(self, now):
        assert should_fire_nudge(_nudge(repeat_days=[0, 6]), now) is False


class TestNextFireTime:
    def test_later_today(self, now):
        assert next_fire_time(_nudge("11:00"), now) == now.replace(hour=11)

    def test_already_passed_moves_to_next_repeat_day(self, now):
        assert next_fire_time(_nudge("09:00"), now) == datetime(2026, 10, 15, 9, 0)

    def test_weekday_nudge_skips_weekend(self):
        friday_evening = datetime(2026, 10, 16, 18, 0)
        assert next_fire_time(_nudge("09:00"), friday_evening) == datetime(2026, 10, 19, 9, 0)

    def test_single_day_wraps_a_full_week(self, now):
        # Wednesday only, already past today
        assert next_fire_time(_nudge("09:00", repeat_days=[3]), now) == datetime(2026, 10, 21, 9, 0)

    def test_no_repeat_days(self, now):
        assert next_fire_time(_nudge(repeat_days=[]), now) is None


# ─────────────────────────────────────────────────────────────────────────────
# Task Picking and Effectiveness
# ─────────────────────────────────────────────────────────────────────────────


class TestPickQuickTask:
    def test_prefers_quick_task_among_oldest(self, make_task, now):
        tasks = [
            make_task(now - timedelta(days=5), estimated_minutes=60, task_id="old"),
            make_task(now - timedelta(days=3), estimated_minutes=10, task_id="quick"),
            make_task(now - timedelta(days=1), task_id="new"),
        ]

        task, reason = pick_quick_task(tasks)

        assert task.id == "quick"
        assert reason == "It's a quick one - about 10 minutes"

    def test_falls_back_to_oldest(self, make_task, now):
        tasks = [
            make_task(now - timedelta(days=1), task_id="new"),
            make_task(now - timedelta(days=4), task_id="old"),
        ]

        task, reason = pick_quick_task(tasks)

        assert task.id == "old"
        assert reason == "It's been waiting for a bit - let's knock it out!"

    def test_quick_task_beyond_five_oldest_is_ignored(self, make_task, now):
        tasks = [make_task(now - timedelta(days=10 - i), task_id=f"t{i}") for i in range(5)]
        tasks.append(make_task(now, estimated_minutes=5, task_id="late_quick"))

        task, _ = pick_quick_task(tasks)

        assert task.id == "t0"

    def test_no_pending_tasks(self, make_task, now):
        assert pick_quick_task([make_task(now, completed=True)]) is None


class TestNudgeEffectiveness:
    def test_action_rate_per_type(self, now):
        history = [
            NotificationHistoryEntry(id="1", type="focus_reminder", sent_at=now, action_taken=True),
            NotificationHistoryEntry(id="2", type="focus_reminder", sent_at=now),
            NotificationHistoryEntry(id="3", type="energy_check", sent_at=now),
        ]

        summary = summarize_nudge_effectiveness(history)

        assert summary["focus_reminder"] == {"sent": 2, "actioned": 1, "action_rate": 0.5}
        assert summary["energy_check"]["action_rate"] == 0.0
