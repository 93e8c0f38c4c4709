from __future__ import annotations

import argparse
import importlib
import pkgutil
from pathlib import Path
from typing import Any

from src.config.settings import load_settings
from src.db.sqlite_client import get_connection
from src.utils.log import log_line

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "migrations"


def _is_postgres(conn: Any) -> bool:
    return conn.__class__.__module__.startswith("psycopg")


def _run(conn: Any, sql: str, params: tuple[Any, ...] = ()) -> Any:
    if _is_postgres(conn):
        cur = conn.cursor()
        cur.execute(sql.replace("?", "%s"), params)
        return cur
    return conn.execute(sql, params)


def ensure_migrations_table(conn: Any) -> None:
    if _is_postgres(conn):
        _run(
            conn,
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id BIGSERIAL PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                applied_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """,
        )
    else:
        _run(
            conn,
            """
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """,
        )
    conn.commit()


def applied_migration_names(conn: Any) -> list[str]:
    rows = _run(conn, "SELECT name FROM _migrations ORDER BY id ASC").fetchall()
    return [row[0] if not isinstance(row, dict) else row["name"] for row in rows]


def discover_migrations() -> list[str]:
    modules = [
        name for _, name, _ in pkgutil.iter_modules([str(MIGRATIONS_DIR)]) if name[:3].isdigit()
    ]
    return sorted(modules)


def apply_all(conn: Any) -> list[str]:
    ensure_migrations_table(conn)
    already = set(applied_migration_names(conn))
    applied: list[str] = []
    for module_name in discover_migrations():
        if module_name in already:
            continue
        mod = importlib.import_module(f"migrations.{module_name}")
        mod.up(conn)
        _run(conn, "INSERT INTO _migrations(name) VALUES (?)", (module_name,))
        conn.commit()
        applied.append(module_name)
        log_line("MIGRATE", "applied", name=module_name)
    return applied


def rollback_last(conn: Any) -> str | None:
    ensure_migrations_table(conn)
    names = applied_migration_names(conn)
    if not names:
        return None
    module_name = names[-1]
    mod = importlib.import_module(f"migrations.{module_name}")
    mod.down(conn)
    _run(conn, "DELETE FROM _migrations WHERE name = ?", (module_name,))
    conn.commit()
    log_line("MIGRATE", "rolled_back", name=module_name)
    return module_name


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db-path", default=load_settings().sqlite_db_path)
    parser.add_argument("--rollback", action="store_true")
    args = parser.parse_args()
    conn = get_connection(args.db_path)
    try:
        if args.rollback:
            rollback_last(conn)
        else:
            apply_all(conn)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
