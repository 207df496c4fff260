"""Tests for cadence/engagement/models.py"""

from datetime import timedelta

import pytest

from cadence.engagement.models import (
    CheckInType,
    NotificationHistoryEntry,
    NotificationStyle,
    NudgeType,
    ProactiveCheckIn,
    ScheduledNudge,
    UserProfile,
)


def _nudge(**overrides):
    fields = {
        "id": "nudge_focus_1",
        "user_id": "u1",
        "scheduled_time": "09:30",
        "type": NudgeType.FOCUS_REMINDER,
        "message": "Ready to focus?",
    }
    fields.update(overrides)
    return ScheduledNudge(**fields)


class TestScheduledNudge:
    """Tests for ScheduledNudge validation."""

    def test_defaults_to_weekdays(self):
        nudge = _nudge()

        assert nudge.enabled is True
        assert nudge.repeat_days == [1, 2, 3, 4, 5]
        assert (nudge.hour, nudge.minute) == (9, 30)

    @pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "noon", ""])
    def test_rejects_bad_time(self, value):
        with pytest.raises(ValueError):
            _nudge(scheduled_time=value)

    @pytest.mark.parametrize("days", [[7], [-1], [0, 3, 9]])
    def test_rejects_bad_repeat_days(self, days):
        with pytest.raises(ValueError):
            _nudge(repeat_days=days)

    def test_dict_round_trip(self):
        nudge = _nudge(enabled=False, repeat_days=[0, 6])
        assert ScheduledNudge.from_dict(nudge.to_dict()) == nudge

    def test_generated_id_prefix(self):
        assert ScheduledNudge.generate_id("focus").startswith("nudge_focus")


class TestProactiveCheckIn:
    def test_pending_means_delivered_and_unanswered(self, now):
        check_in = ProactiveCheckIn(
            id="chk_1", type=CheckInType.PEAK_TIME, message="Go!", scheduled_time=now,
            delivered=True,
        )
        assert check_in.is_pending

        check_in.responded = True
        assert not check_in.is_pending

    def test_dict_round_trip(self, now):
        check_in = ProactiveCheckIn(
            id="chk_1", type=CheckInType.MOOD_BASED, message="Hey", scheduled_time=now,
            delivered=True, responded=True, response="fine",
        )
        assert ProactiveCheckIn.from_dict(check_in.to_dict()) == check_in


class TestNotificationHistoryEntry:
    def test_dismissed_without_action(self, now):
        entry = NotificationHistoryEntry(id="n1", type="smart_reminder", sent_at=now, dismissed=True)
        assert entry.dismissed_without_action

    def test_round_trip_with_acknowledgement(self, now):
        entry = NotificationHistoryEntry(
            id="n1", type="smart_reminder", sent_at=now,
            acknowledged_at=now + timedelta(minutes=3), action_taken=True,
        )
        assert NotificationHistoryEntry.from_dict(entry.to_dict()) == entry


class TestUserProfile:
    def test_defaults(self):
        profile = UserProfile.from_dict({"user_id": "u1"})

        assert profile.proactive_checkins_enabled is True
        assert profile.smart_notifications_enabled is True
        assert profile.notification_style == NotificationStyle.GENTLE

    def test_unknown_style_rejected(self):
        with pytest.raises(ValueError):
            UserProfile.from_dict({"user_id": "u1", "notification_style": "shouty"})
