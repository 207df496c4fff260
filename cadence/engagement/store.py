"""
Tool: Engagement Store
Purpose: Persist nudge schedules, notification history and check-in history

All records are keyed by id and scoped per user. Write failures are logged
and reported as False; reads that fail return an empty result.

Usage:
    from cadence.engagement.store import save_nudge, list_nudges, toggle_nudge

    await save_nudge(nudge)
    nudges = await list_nudges("alice", enabled_only=True)
    await toggle_nudge("alice", nudge.id, enabled=False)
"""

import json
import sqlite3
from datetime import datetime

from cadence.engagement import get_connection
from cadence.engagement.models import NotificationHistoryEntry, ProactiveCheckIn, ScheduledNudge
from cadence.history.models import ingest_rows
from cadence.logging_config import get_logger


logger = get_logger(__name__)


def _nudge_from_row(row: sqlite3.Row) -> dict:
    data = dict(row)
    data["repeat_days"] = json.loads(data["repeat_days"]) if data.get("repeat_days") else []
    return data


# =============================================================================
# Nudges
# =============================================================================


async def save_nudge(nudge: ScheduledNudge) -> bool:
    """Insert or update a nudge."""
    try:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT INTO nudges
                    (id, user_id, scheduled_time, type, message, enabled, repeat_days, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    scheduled_time = excluded.scheduled_time,
                    type = excluded.type,
                    message = excluded.message,
                    enabled = excluded.enabled,
                    repeat_days = excluded.repeat_days,
                    updated_at = excluded.updated_at
                """,
                (
                    nudge.id,
                    nudge.user_id,
                    nudge.scheduled_time,
                    nudge.type.value,
                    nudge.message,
                    nudge.enabled,
                    json.dumps(list(nudge.repeat_days)),
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("nudge_save_failed", nudge_id=nudge.id, error=str(e))
        return False
    return True


async def get_nudge(user_id: str, nudge_id: str) -> ScheduledNudge | None:
    try:
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM nudges WHERE id = ? AND user_id = ?", (nudge_id, user_id)
            ).fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("nudge_read_failed", nudge_id=nudge_id, error=str(e))
        return None

    if not row:
        return None
    nudges = ingest_rows([_nudge_from_row(row)], ScheduledNudge)
    return nudges[0] if nudges else None


async def list_nudges(user_id: str, enabled_only: bool = False) -> list[ScheduledNudge]:
    query = "SELECT * FROM nudges WHERE user_id = ?"
    if enabled_only:
        query += " AND enabled = 1"
    query += " ORDER BY scheduled_time, id"

    try:
        conn = get_connection()
        try:
            rows = conn.execute(query, (user_id,)).fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("nudge_list_failed", user_id=user_id, error=str(e))
        return []

    return ingest_rows([_nudge_from_row(r) for r in rows], ScheduledNudge)


async def toggle_nudge(user_id: str, nudge_id: str, enabled: bool) -> bool:
    """Enable or disable a nudge. False if it does not exist or the write failed."""
    try:
        conn = get_connection()
        try:
            cursor = conn.execute(
                "UPDATE nudges SET enabled = ?, updated_at = ? WHERE id = ? AND user_id = ?",
                (enabled, datetime.now().isoformat(), nudge_id, user_id),
            )
            conn.commit()
            updated = cursor.rowcount > 0
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("nudge_toggle_failed", nudge_id=nudge_id, error=str(e))
        return False
    return updated


async def delete_nudge(user_id: str, nudge_id: str) -> bool:
    try:
        conn = get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM nudges WHERE id = ? AND user_id = ?", (nudge_id, user_id)
            )
            conn.commit()
            deleted = cursor.rowcount > 0
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("nudge_delete_failed", nudge_id=nudge_id, error=str(e))
        return False
    return deleted


# =============================================================================
# Audit logs
# =============================================================================


async def save_notification(user_id: str, entry: NotificationHistoryEntry) -> bool:
    try:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO notification_history
                    (id, user_id, type, sent_at, acknowledged_at, dismissed, action_taken)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    user_id,
                    entry.type,
                    entry.sent_at.isoformat(),
                    entry.acknowledged_at.isoformat() if entry.acknowledged_at else None,
                    entry.dismissed,
                    entry.action_taken,
                ),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("notification_save_failed", notification_id=entry.id, error=str(e))
        return False
    return True


async def list_notifications(
    user_id: str, since: datetime | None = None
) -> list[NotificationHistoryEntry]:
    query = "SELECT * FROM notification_history WHERE user_id = ?"
    params: list = [user_id]
    if since is not None:
        query += " AND sent_at >= ?"
        params.append(since.isoformat())
    query += " ORDER BY sent_at"

    try:
        conn = get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("notification_list_failed", user_id=user_id, error=str(e))
        return []

    return ingest_rows([dict(r) for r in rows], NotificationHistoryEntry)


async def save_check_in(user_id: str, check_in: ProactiveCheckIn) -> bool:
    try:
        conn = get_connection()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO check_in_history
                    (id, user_id, type, message, scheduled_time, delivered, responded, response)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    check_in.id,
                    user_id,
                    check_in.type.value,
                    check_in.message,
                    check_in.scheduled_time.isoformat(),
                    check_in.delivered,
                    check_in.responded,
                    check_in.response,
                ),
            )
            conn.commit()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("check_in_save_failed", check_in_id=check_in.id, error=str(e))
        return False
    return True


async def list_check_ins(user_id: str, since: datetime | None = None) -> list[ProactiveCheckIn]:
    query = "SELECT * FROM check_in_history WHERE user_id = ?"
    params: list = [user_id]
    if since is not None:
        query += " AND scheduled_time >= ?"
        params.append(since.isoformat())
    query += " ORDER BY scheduled_time"

    try:
        conn = get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("check_in_list_failed", user_id=user_id, error=str(e))
        return []

    return ingest_rows([dict(r) for r in rows], ProactiveCheckIn)
