"""Tests for cadence/engagement/store.py

Runs against a temporary engagement database. A nudge saved then loaded
back must compare equal field for field.
"""

import sqlite3
from datetime import timedelta
from unittest.mock import patch

import pytest

from cadence.engagement.models import (
    CheckInType,
    NotificationHistoryEntry,
    NudgeType,
    ProactiveCheckIn,
    ScheduledNudge,
)
from cadence.engagement.store import (
    delete_nudge,
    get_nudge,
    list_check_ins,
    list_notifications,
    list_nudges,
    save_check_in,
    save_notification,
    save_nudge,
    toggle_nudge,
)


def _nudge(nudge_id, user_id="u1", time="09:00", enabled=True):
    return ScheduledNudge(
        id=nudge_id,
        user_id=user_id,
        scheduled_time=time,
        type=NudgeType.ENERGY_CHECK,
        message="How's your energy?",
        enabled=enabled,
        repeat_days=[0, 2, 4],
    )


# ─────────────────────────────────────────────────────────────────────────────
# Nudges
# ─────────────────────────────────────────────────────────────────────────────


class TestNudgePersistence:
    """Tests for nudge CRUD."""

    @pytest.mark.asyncio
    async def test_round_trip_is_field_for_field(self, engagement_db):
        nudge = _nudge("n1", enabled=False)

        assert await save_nudge(nudge) is True
        loaded = await get_nudge("u1", "n1")

        assert loaded == nudge

    @pytest.mark.asyncio
    async def test_save_updates_existing(self, engagement_db):
        await save_nudge(_nudge("n1", time="09:00"))
        await save_nudge(_nudge("n1", time="15:30"))

        nudges = await list_nudges("u1")

        assert [n.scheduled_time for n in nudges] == ["15:30"]

    @pytest.mark.asyncio
    async def test_list_ordered_and_filtered(self, engagement_db):
        await save_nudge(_nudge("late", time="16:00"))
        await save_nudge(_nudge("early", time="08:00"))
        await save_nudge(_nudge("off", time="12:00", enabled=False))

        assert [n.id for n in await list_nudges("u1")] == ["early", "off", "late"]
        assert [n.id for n in await list_nudges("u1", enabled_only=True)] == ["early", "late"]

    @pytest.mark.asyncio
    async def test_scoped_per_user(self, engagement_db):
        await save_nudge(_nudge("n1", user_id="alice"))

        assert await list_nudges("bob") == []
        assert await get_nudge("bob", "n1") is None
        assert await toggle_nudge("bob", "n1", False) is False
        assert await delete_nudge("bob", "n1") is False

    @pytest.mark.asyncio
    async def test_toggle_and_delete(self, engagement_db):
        await save_nudge(_nudge("n1"))

        assert await toggle_nudge("u1", "n1", False) is True
        assert (await get_nudge("u1", "n1")).enabled is False

        assert await delete_nudge("u1", "n1") is True
        assert await get_nudge("u1", "n1") is None
        assert await delete_nudge("u1", "n1") is False

    @pytest.mark.asyncio
    async def test_write_failure_returns_false(self, engagement_db):
        with patch(
            "cadence.engagement.store.get_connection",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            assert await save_nudge(_nudge("n1")) is False
            assert await list_nudges("u1") == []


# ─────────────────────────────────────────────────────────────────────────────
# Audit Logs
# ─────────────────────────────────────────────────────────────────────────────


class TestAuditLogs:
    @pytest.mark.asyncio
    async def test_notification_history(self, engagement_db, now):
        old = NotificationHistoryEntry(id="a", type="smart_reminder", sent_at=now - timedelta(days=2))
        recent = NotificationHistoryEntry(
            id="b", type="smart_reminder", sent_at=now,
            acknowledged_at=now + timedelta(minutes=1), dismissed=True,
        )
        await save_notification("u1", recent)
        await save_notification("u1", old)

        assert await list_notifications("u1") == [old, recent]
        assert await list_notifications("u1", since=now - timedelta(hours=1)) == [recent]
        assert await list_notifications("u2") == []

    @pytest.mark.asyncio
    async def test_check_in_history(self, engagement_db, now):
        check_in = ProactiveCheckIn(
            id="chk_1", type=CheckInType.ENERGY_DIP, message="Slump?",
            scheduled_time=now, delivered=True,
        )
        await save_check_in("u1", check_in)

        check_in.responded = True
        check_in.response = "a bit tired"
        await save_check_in("u1", check_in)

        assert await list_check_ins("u1") == [check_in]
