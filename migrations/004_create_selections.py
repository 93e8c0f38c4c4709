from __future__ import annotations

import sqlite3


def up(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS selections (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            schedule_id INTEGER NOT NULL REFERENCES schedules(id) ON DELETE CASCADE,
            member_id INTEGER REFERENCES members(id) ON DELETE CASCADE,
            user_id INTEGER REFERENCES users(id) ON DELETE CASCADE,
            CHECK((member_id IS NULL) <> (user_id IS NULL)),
            UNIQUE(schedule_id, member_id),
            UNIQUE(schedule_id, user_id)
        );
        CREATE INDEX IF NOT EXISTS idx_selections_schedule ON selections(schedule_id);
        """
    )
    conn.commit()


def down(conn: sqlite3.Connection) -> None:
    conn.executescript("DROP TABLE IF EXISTS selections;")
    conn.commit()
