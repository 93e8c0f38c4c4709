from __future__ import annotations

import json
import os

from src.db.sqlite_client import create_user, get_connection, init_schema
from src.engine.errors import TimetableNotPublicError
from src.engine.fixed_schedule import FixedScheduleEntry, read_fixed_schedule
from src.ingestion.import_timetable import main


def test_main_prints_normalized_schedule(mocker, capsys):
    mocker.patch(
        "src.ingestion.import_timetable.normalize_external_timetable",
        return_value=[FixedScheduleEntry("월", ["09:00", "09:30"])],
    )
    assert main(["--identifier", "abc123"]) == 0
    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload == {"schedules": [{"time_point": "월", "times": ["09:00", "09:30"]}]}


def test_main_reports_typed_failure(mocker, capsys):
    mocker.patch(
        "src.ingestion.import_timetable.normalize_external_timetable",
        side_effect=TimetableNotPublicError(),
    )
    assert main(["--identifier", "abc123"]) == 1
    assert "FIXED-005" in capsys.readouterr().err


def test_main_saves_fixed_schedule_for_user(mocker, monkeypatch, tmp_path):
    os.environ.pop("DATABASE_URL", None)
    db_path = str(tmp_path / "cli.db")
    monkeypatch.setenv("SQLITE_DB_PATH", db_path)
    conn = get_connection(db_path)
    init_schema(conn)
    user_id = create_user(conn, "Ann")
    conn.close()

    mocker.patch(
        "src.ingestion.import_timetable.normalize_external_timetable",
        return_value=[FixedScheduleEntry("화", ["10:00"])],
    )
    assert main(["--identifier", "abc123", "--user-id", str(user_id)]) == 0

    conn = get_connection(db_path)
    try:
        assert read_fixed_schedule(conn, user_id) == [FixedScheduleEntry("화", ["10:00"])]
    finally:
        conn.close()


def test_main_rejects_invalid_settings(monkeypatch, capsys):
    monkeypatch.setenv("TIMETABLE_TIMEOUT_SECONDS", "0")
    assert main(["--identifier", "abc123"]) == 2
    assert "TIMETABLE_TIMEOUT_SECONDS" in capsys.readouterr().err
