"""History - the immutable record stream the engine reads from

Components:
    models.py: Typed records and the ingestion boundary
    store.py: HistoryStore contract plus in-memory and SQLite adapters

Database: data/history.db
    - completions: Task completions
    - energy_logs: Energy check-ins (1-10 scale)
    - mood_entries: Mood check-ins
    - focus_sessions: Finished focus sessions
"""

import sqlite3
from pathlib import Path

from cadence import DATA_DIR


DB_PATH = DATA_DIR / "history.db"


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
        CREATE TABLE IF NOT EXISTS completions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            task_id TEXT NOT NULL,
            task_title TEXT,
            energy TEXT NOT NULL,
            completed_at DATETIME NOT NULL,
            completion_duration_ms INTEGER,
            mood TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS energy_logs (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            level REAL NOT NULL,
            timestamp DATETIME NOT NULL,
            notes TEXT,
            context TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS mood_entries (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            mood TEXT NOT NULL,
            timestamp DATETIME NOT NULL,
            energy TEXT,
            notes TEXT,
            context TEXT
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS focus_sessions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            task_id TEXT,
            started_at DATETIME NOT NULL,
            ended_at DATETIME,
            duration_minutes REAL NOT NULL
        )
    """)

    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_completions_user ON completions(user_id, completed_at)"
    )
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_energy_user ON energy_logs(user_id, timestamp)"
    )
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_mood_user ON mood_entries(user_id, timestamp)")
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_focus_user ON focus_sessions(user_id, started_at)"
    )

    conn.commit()
    return conn
