from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    category TEXT NOT NULL CHECK(category IN ('DATE', 'DAY')),
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schedules (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    time_point TEXT NOT NULL,
    time TEXT NOT NULL,
    UNIQUE(event_id, time_point, time)
);

CREATE INDEX IF NOT EXISTS idx_schedules_event ON schedules(event_id);

CREATE TABLE IF NOT EXISTS members (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    pin TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(event_id, name)
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    nickname TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS event_participations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    status TEXT NOT NULL CHECK(status IN ('CREATOR', 'PARTICIPANT')),
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(event_id, user_id)
);

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

POSTGRES_SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS events (
        id BIGSERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        category TEXT NOT NULL CHECK(category IN ('DATE', 'DAY')),
        start_time TEXT NOT NULL,
        end_time TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS schedules (
        id BIGSERIAL PRIMARY KEY,
        event_id BIGINT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
        time_point TEXT NOT NULL,
        time TEXT NOT NULL,
        UNIQUE(event_id, time_point, time)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_schedules_event ON schedules(event_id)",
    """
    CREATE TABLE IF NOT EXISTS members (
        id BIGSERIAL PRIMARY KEY,
        event_id BIGINT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        pin TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(event_id, name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id BIGSERIAL PRIMARY KEY,
        nickname TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS event_participations (
        id BIGSERIAL PRIMARY KEY,
        event_id BIGINT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
        user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        status TEXT NOT NULL CHECK(status IN ('CREATOR', 'PARTICIPANT')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(event_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS selections (
        id BIGSERIAL PRIMARY KEY,
        schedule_id BIGINT NOT NULL REFERENCES schedules(id) ON DELETE CASCADE,
        member_id BIGINT REFERENCES members(id) ON DELETE CASCADE,
        user_id BIGINT REFERENCES users(id) ON DELETE CASCADE,
        CHECK((member_id IS NULL) <> (user_id IS NULL)),
        UNIQUE(schedule_id, member_id),
        UNIQUE(schedule_id, user_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_selections_schedule ON selections(schedule_id)",
    """
    CREATE TABLE IF NOT EXISTS fixed_schedules (
        id BIGSERIAL PRIMARY KEY,
        day TEXT NOT NULL,
        time TEXT NOT NULL,
        UNIQUE(day, time)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS fixed_selections (
        id BIGSERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        fixed_schedule_id BIGINT NOT NULL REFERENCES fixed_schedules(id) ON DELETE CASCADE,
        UNIQUE(user_id, fixed_schedule_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_fixed_selections_user ON fixed_selections(user_id)",
]


def _is_postgres(conn: Any) -> bool:
    return conn.__class__.__module__.startswith("psycopg")


def _adapt_sql(conn: Any, sql: str) -> str:
    return sql.replace("?", "%s") if _is_postgres(conn) else sql


def _execute(conn: Any, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Any:
    if _is_postgres(conn):
        cur = conn.cursor()
        cur.execute(_adapt_sql(conn, sql), tuple(params))
        return cur
    return conn.execute(_adapt_sql(conn, sql), tuple(params))


def _executemany(conn: Any, sql: str, params_seq: list[tuple[Any, ...]]) -> Any:
    if not params_seq:
        return None
    if _is_postgres(conn):
        cur = conn.cursor()
        cur.executemany(_adapt_sql(conn, sql), params_seq)
        return cur
    return conn.executemany(_adapt_sql(conn, sql), params_seq)


def _insert_returning_id(conn: Any, sql: str, params: list[Any]) -> int:
    if _is_postgres(conn):
        row = _execute(conn, f"{sql} RETURNING id", params).fetchone()
        return int(_to_dict(row)["id"])
    return int(_execute(conn, sql, params).lastrowid)


def _to_dict(row: Any) -> dict[str, Any]:
    return row if isinstance(row, dict) else dict(row)


def _placeholders(values: Iterable[Any]) -> str:
    return ", ".join("?" for _ in values)


def get_connection(db_path: str) -> Any:
    database_url = os.getenv("DATABASE_URL", "").strip()
    if database_url:
        from psycopg import connect
        from psycopg.rows import dict_row

        return connect(database_url, row_factory=dict_row, autocommit=False)

    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def init_schema(conn: Any) -> None:
    if _is_postgres(conn):
        cur = conn.cursor()
        for statement in POSTGRES_SCHEMA_STATEMENTS:
            cur.execute(statement)
    else:
        conn.executescript(SQLITE_SCHEMA)
    conn.commit()


def create_event(conn: Any, title: str, category: str, start_time: str, end_time: str) -> int:
    event_id = _insert_returning_id(
        conn,
        "INSERT INTO events (title, category, start_time, end_time) VALUES (?, ?, ?, ?)",
        [title, category, start_time, end_time],
    )
    conn.commit()
    return event_id


def get_event(conn: Any, event_id: int) -> dict[str, Any] | None:
    row = _execute(conn, "SELECT * FROM events WHERE id = ?", [event_id]).fetchone()
    return _to_dict(row) if row else None


def update_event_times(conn: Any, event_id: int, start_time: str, end_time: str) -> None:
    _execute(
        conn,
        "UPDATE events SET start_time = ?, end_time = ? WHERE id = ?",
        [start_time, end_time, event_id],
    )
    conn.commit()


def delete_event(conn: Any, event_id: int) -> bool:
    # Selections go before the slots and participants they reference.
    _execute(
        conn,
        "DELETE FROM selections WHERE schedule_id IN (SELECT id FROM schedules WHERE event_id = ?)",
        [event_id],
    )
    _execute(conn, "DELETE FROM schedules WHERE event_id = ?", [event_id])
    _execute(conn, "DELETE FROM members WHERE event_id = ?", [event_id])
    _execute(conn, "DELETE FROM event_participations WHERE event_id = ?", [event_id])
    cur = _execute(conn, "DELETE FROM events WHERE id = ?", [event_id])
    conn.commit()
    return cur.rowcount > 0


def insert_schedules(conn: Any, event_id: int, slots: list[tuple[str, str]]) -> None:
    _executemany(
        conn,
        "INSERT INTO schedules (event_id, time_point, time) VALUES (?, ?, ?)",
        [(event_id, time_point, time) for time_point, time in slots],
    )
    conn.commit()


def get_schedules(
    conn: Any, event_id: int, time_point: str | None = None
) -> list[dict[str, Any]]:
    sql = "SELECT * FROM schedules WHERE event_id = ?"
    params: list[Any] = [event_id]
    if time_point is not None:
        sql += " AND time_point = ?"
        params.append(time_point)
    sql += " ORDER BY id ASC"
    return [_to_dict(row) for row in _execute(conn, sql, params).fetchall()]


def _delete_schedules_where(conn: Any, event_id: int, column: str, values: list[str]) -> int:
    if not values:
        return 0
    where = f"event_id = ? AND {column} IN ({_placeholders(values)})"
    params = [event_id, *values]
    _execute(
        conn,
        f"DELETE FROM selections WHERE schedule_id IN (SELECT id FROM schedules WHERE {where})",
        params,
    )
    cur = _execute(conn, f"DELETE FROM schedules WHERE {where}", params)
    conn.commit()
    return int(cur.rowcount)


def delete_schedules_by_time_points(conn: Any, event_id: int, time_points: list[str]) -> int:
    return _delete_schedules_where(conn, event_id, "time_point", time_points)


def delete_schedules_by_times(conn: Any, event_id: int, times: list[str]) -> int:
    return _delete_schedules_where(conn, event_id, "time", times)


def create_member(conn: Any, event_id: int, name: str, pin: str) -> int:
    member_id = _insert_returning_id(
        conn,
        "INSERT INTO members (event_id, name, pin) VALUES (?, ?, ?)",
        [event_id, name, pin],
    )
    conn.commit()
    return member_id


def get_member_by_name(conn: Any, event_id: int, name: str) -> dict[str, Any] | None:
    row = _execute(
        conn, "SELECT * FROM members WHERE event_id = ? AND name = ?", [event_id, name]
    ).fetchone()
    return _to_dict(row) if row else None


def get_members(conn: Any, event_id: int) -> list[dict[str, Any]]:
    rows = _execute(
        conn, "SELECT * FROM members WHERE event_id = ? ORDER BY id ASC", [event_id]
    ).fetchall()
    return [_to_dict(row) for row in rows]


def create_user(conn: Any, nickname: str) -> int:
    user_id = _insert_returning_id(conn, "INSERT INTO users (nickname) VALUES (?)", [nickname])
    conn.commit()
    return user_id


def get_user(conn: Any, user_id: int) -> dict[str, Any] | None:
    row = _execute(conn, "SELECT * FROM users WHERE id = ?", [user_id]).fetchone()
    return _to_dict(row) if row else None


def ensure_participation(conn: Any, event_id: int, user_id: int, status: str) -> None:
    _execute(
        conn,
        """
        INSERT INTO event_participations (event_id, user_id, status)
        VALUES (?, ?, ?)
        ON CONFLICT(event_id, user_id) DO NOTHING
        """,
        [event_id, user_id, status],
    )
    conn.commit()


def get_participations(conn: Any, event_id: int) -> list[dict[str, Any]]:
    rows = _execute(
        conn,
        """
        SELECT ep.user_id, ep.status, u.nickname
        FROM event_participations ep
        JOIN users u ON u.id = ep.user_id
        WHERE ep.event_id = ?
        ORDER BY ep.id ASC
        """,
        [event_id],
    ).fetchall()
    return [_to_dict(row) for row in rows]


def replace_member_selections(conn: Any, member_id: int, schedule_ids: list[int]) -> None:
    _execute(conn, "DELETE FROM selections WHERE member_id = ?", [member_id])
    _executemany(
        conn,
        "INSERT INTO selections (schedule_id, member_id) VALUES (?, ?)",
        [(schedule_id, member_id) for schedule_id in schedule_ids],
    )
    conn.commit()


def replace_user_selections(
    conn: Any, event_id: int, user_id: int, schedule_ids: list[int]
) -> None:
    _execute(
        conn,
        """
        DELETE FROM selections
        WHERE user_id = ? AND schedule_id IN (SELECT id FROM schedules WHERE event_id = ?)
        """,
        [user_id, event_id],
    )
    _executemany(
        conn,
        "INSERT INTO selections (schedule_id, user_id) VALUES (?, ?)",
        [(schedule_id, user_id) for schedule_id in schedule_ids],
    )
    conn.commit()


def get_event_selections(
    conn: Any,
    event_id: int,
    member_ids: list[int] | None = None,
    user_ids: list[int] | None = None,
) -> list[dict[str, Any]]:
    sql = """
        SELECT sel.id, sel.schedule_id, s.time_point, s.time,
               sel.member_id, m.name AS member_name,
               sel.user_id, u.nickname AS user_nickname
        FROM selections sel
        JOIN schedules s ON s.id = sel.schedule_id
        LEFT JOIN members m ON m.id = sel.member_id
        LEFT JOIN users u ON u.id = sel.user_id
        WHERE s.event_id = ?
    """
    params: list[Any] = [event_id]
    if member_ids is not None or user_ids is not None:
        clauses: list[str] = []
        if member_ids:
            clauses.append(f"sel.member_id IN ({_placeholders(member_ids)})")
            params.extend(member_ids)
        if user_ids:
            clauses.append(f"sel.user_id IN ({_placeholders(user_ids)})")
            params.extend(user_ids)
        sql += f" AND ({' OR '.join(clauses) or '1=0'})"
    sql += " ORDER BY s.id ASC, sel.id ASC"
    return [_to_dict(row) for row in _execute(conn, sql, params).fetchall()]


def seed_fixed_schedules(conn: Any, slots: list[tuple[str, str]]) -> None:
    _executemany(
        conn,
        "INSERT INTO fixed_schedules (day, time) VALUES (?, ?) ON CONFLICT(day, time) DO NOTHING",
        slots,
    )
    conn.commit()


def get_fixed_schedules_by_day(conn: Any, day: str) -> list[dict[str, Any]]:
    rows = _execute(
        conn, "SELECT * FROM fixed_schedules WHERE day = ? ORDER BY id ASC", [day]
    ).fetchall()
    return [_to_dict(row) for row in rows]


def replace_fixed_selections(conn: Any, user_id: int, fixed_schedule_ids: list[int]) -> None:
    _execute(conn, "DELETE FROM fixed_selections WHERE user_id = ?", [user_id])
    _executemany(
        conn,
        "INSERT INTO fixed_selections (user_id, fixed_schedule_id) VALUES (?, ?)",
        [(user_id, fixed_schedule_id) for fixed_schedule_id in fixed_schedule_ids],
    )
    conn.commit()


def get_fixed_selections(conn: Any, user_id: int) -> list[dict[str, Any]]:
    rows = _execute(
        conn,
        """
        SELECT fs.day, fs.time
        FROM fixed_selections sel
        JOIN fixed_schedules fs ON fs.id = sel.fixed_schedule_id
        WHERE sel.user_id = ?
        ORDER BY sel.id ASC
        """,
        [user_id],
    ).fetchall()
    return [_to_dict(row) for row in rows]
