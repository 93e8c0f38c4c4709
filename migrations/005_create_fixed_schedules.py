from __future__ import annotations

import sqlite3

WEEKDAYS = ("월", "화", "수", "목", "금", "토", "일")


def up(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS fixed_schedules (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            day TEXT NOT NULL,
            time TEXT NOT NULL,
            UNIQUE(day, time)
        );
        CREATE TABLE IF NOT EXISTS fixed_selections (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            fixed_schedule_id INTEGER NOT NULL REFERENCES fixed_schedules(id) ON DELETE CASCADE,
            UNIQUE(user_id, fixed_schedule_id)
        );
        CREATE INDEX IF NOT EXISTS idx_fixed_selections_user ON fixed_selections(user_id);
        """
    )
    conn.executemany(
        "INSERT OR IGNORE INTO fixed_schedules (day, time) VALUES (?, ?)",
        [
            (day, f"{minute // 60:02d}:{minute % 60:02d}")
            for day in WEEKDAYS
            for minute in range(0, 24 * 60, 30)
        ],
    )
    conn.commit()


def down(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        DROP TABLE IF EXISTS fixed_selections;
        DROP TABLE IF EXISTS fixed_schedules;
        """
    )
    conn.commit()
