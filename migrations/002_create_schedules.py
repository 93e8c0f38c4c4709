from __future__ import annotations

import sqlite3


def up(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS schedules (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
            time_point TEXT NOT NULL,
            time TEXT NOT NULL,
            UNIQUE(event_id, time_point, time)
        );
        CREATE INDEX IF NOT EXISTS idx_schedules_event ON schedules(event_id);
        """
    )
    conn.commit()


def down(conn: sqlite3.Connection) -> None:
    conn.executescript("DROP TABLE IF EXISTS schedules;")
    conn.commit()
