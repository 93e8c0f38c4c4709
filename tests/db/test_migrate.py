from __future__ import annotations

from src.db.migrate import apply_all, discover_migrations, rollback_last
from src.db.sqlite_client import get_connection


def test_discover_migrations_is_ordered():
    names = discover_migrations()
    assert names[0] == "001_create_events"
    assert names == sorted(names)


def test_apply_all_is_idempotent_and_seeds_reference_slots(tmp_path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    conn = get_connection(str(tmp_path / "migrated.db"))
    try:
        applied = apply_all(conn)
        assert applied == discover_migrations()
        assert apply_all(conn) == []
        count = conn.execute("SELECT COUNT(*) FROM fixed_schedules").fetchone()[0]
        assert count == 7 * 48
    finally:
        conn.close()


def test_rollback_last_reverts_latest_migration(tmp_path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    conn = get_connection(str(tmp_path / "rollback.db"))
    try:
        apply_all(conn)
        latest = discover_migrations()[-1]
        assert rollback_last(conn) == latest
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert "fixed_schedules" not in tables
        assert "events" in tables
    finally:
        conn.close()
