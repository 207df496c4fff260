"""Engagement - deciding when to reach out, and how gently

Philosophy:
    Reaching out should help, never nag. Every ad-hoc notification passes
    a throttle (quiet hours, rate limit, dismissal fatigue) and low mood
    always gets the gentlest tone.

Components:
    models.py: Check-ins, nudges, notification history, user profile
    messages.py: Message pools and injectable random selection
    checkin.py: Proactive check-in rules with cooldown
    nudges.py: Optimal time slots and the recommended nudge schedule
    throttle.py: Gate and timing for ad-hoc smart notifications
    sink.py: NotificationSink contract and in-memory sink
    store.py: Persistence for nudges and audit logs

Database: data/engagement.db
    - nudges: Scheduled recurring nudges
    - notification_history: Ad-hoc notification audit trail
    - check_in_history: Proactive check-ins and responses
"""

import sqlite3
from pathlib import Path

from cadence import DATA_DIR


DB_PATH = DATA_DIR / "engagement.db"


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    """
    Get database connection, creating tables if needed.

    Returns:
        SQLite connection with row_factory set
    """
    path = db_path or DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS nudges (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            scheduled_time TEXT NOT NULL,
            type TEXT NOT NULL,
            message TEXT NOT NULL,
            enabled BOOLEAN DEFAULT TRUE,
            repeat_days TEXT NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS notification_history (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            type TEXT NOT NULL,
            sent_at DATETIME NOT NULL,
            acknowledged_at DATETIME,
            dismissed BOOLEAN DEFAULT FALSE,
            action_taken BOOLEAN DEFAULT FALSE
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS check_in_history (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            type TEXT NOT NULL,
            message TEXT NOT NULL,
            scheduled_time DATETIME NOT NULL,
            delivered BOOLEAN DEFAULT FALSE,
            responded BOOLEAN DEFAULT FALSE,
            response TEXT
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_nudges_user ON nudges(user_id)")
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_notification_history_user "
        "ON notification_history(user_id, sent_at)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_check_in_history_user "
        "ON check_in_history(user_id, scheduled_time)"
    )

    conn.commit()
    return conn
