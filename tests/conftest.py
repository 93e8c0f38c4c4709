from __future__ import annotations

import os
import sqlite3
from collections.abc import Generator
from pathlib import Path

import pytest

from src.db.sqlite_client import get_connection, init_schema
from src.engine.fixed_schedule import seed_reference_slots
from src.engine.participants import Member, Selection, User
from src.engine.slots import Slot


@pytest.fixture
def sqlite_db(tmp_path: Path) -> Generator[sqlite3.Connection, None, None]:
    os.environ.pop("DATABASE_URL", None)
    db_path = str(tmp_path / "test.db")
    conn = get_connection(db_path)
    init_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def seeded_db(sqlite_db: sqlite3.Connection) -> sqlite3.Connection:
    seed_reference_slots(sqlite_db)
    return sqlite_db


@pytest.fixture
def make_selections():
    """Build selections from ``{(time_point, time): [names]}``; names starting with '@' are users."""

    def _make(picks: dict[tuple[str, str], list[str]]) -> list[Selection]:
        out: list[Selection] = []
        for idx, ((time_point, time), names) in enumerate(picks.items()):
            for offset, name in enumerate(names):
                participant: Member | User
                if name.startswith("@"):
                    participant = User(user_id=idx * 100 + offset, nickname=name[1:])
                else:
                    participant = Member(member_id=idx * 100 + offset, name=name)
                out.append(Selection(participant=participant, slot=Slot(time_point, time)))
        return out

    return _make
