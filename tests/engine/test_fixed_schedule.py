from __future__ import annotations

import pytest

from src.db.sqlite_client import create_user, get_fixed_schedules_by_day
from src.engine.errors import ParticipantNotFoundError, ReferenceDataMissingError
from src.engine.fixed_schedule import (
    FixedScheduleEntry,
    consolidate_fixed_schedule,
    group_by_time_point,
    match_reference_times,
    read_fixed_schedule,
)


def test_round_trip_returns_submitted_mapping(seeded_db):
    user_id = create_user(seeded_db, "Ann")
    consolidate_fixed_schedule(seeded_db, user_id, {"월": ["09:00", "09:30"]})
    assert read_fixed_schedule(seeded_db, user_id) == [
        FixedScheduleEntry("월", ["09:00", "09:30"])
    ]


def test_resubmission_replaces_everything(seeded_db):
    user_id = create_user(seeded_db, "Ann")
    consolidate_fixed_schedule(seeded_db, user_id, {"월": ["09:00"], "화": ["10:00"]})
    consolidate_fixed_schedule(seeded_db, user_id, [FixedScheduleEntry("수", ["13:00"])])
    assert [e.to_dict() for e in read_fixed_schedule(seeded_db, user_id)] == [
        {"time_point": "수", "times": ["13:00"]}
    ]


def test_times_without_reference_slot_are_dropped(seeded_db):
    user_id = create_user(seeded_db, "Ann")
    consolidate_fixed_schedule(seeded_db, user_id, {"금": ["09:15", "18:00"]})
    assert read_fixed_schedule(seeded_db, user_id) == [FixedScheduleEntry("금", ["18:00"])]


def test_unknown_weekday_raises_and_keeps_previous_state(seeded_db):
    user_id = create_user(seeded_db, "Ann")
    consolidate_fixed_schedule(seeded_db, user_id, {"월": ["09:00"]})
    with pytest.raises(ReferenceDataMissingError):
        consolidate_fixed_schedule(seeded_db, user_id, {"MON": ["09:00"]})
    assert read_fixed_schedule(seeded_db, user_id) == [FixedScheduleEntry("월", ["09:00"])]


def test_unknown_user_is_rejected(seeded_db):
    with pytest.raises(ParticipantNotFoundError):
        read_fixed_schedule(seeded_db, 404)


def test_reference_slots_cover_the_whole_day(seeded_db):
    reference = get_fixed_schedules_by_day(seeded_db, "일")
    assert len(reference) == 48
    assert reference[0]["time"] == "00:00"
    assert reference[-1]["time"] == "23:30"


def test_group_by_time_point_keeps_discovery_order():
    rows = [
        {"day": "수", "time": "09:00"},
        {"day": "월", "time": "10:00"},
        {"day": "수", "time": "09:30"},
    ]
    assert group_by_time_point(rows) == [
        FixedScheduleEntry("수", ["09:00", "09:30"]),
        FixedScheduleEntry("월", ["10:00"]),
    ]


def test_match_reference_times():
    reference = [{"id": 1, "time": "09:00"}, {"id": 2, "time": "09:30"}]
    assert match_reference_times(reference, ["09:30", "11:00"]) == [2]


def test_repeated_weekday_is_stored_once(seeded_db):
    user_id = create_user(seeded_db, "Ann")
    consolidate_fixed_schedule(seeded_db, user_id, {"화": ["10:00"]})
    consolidate_fixed_schedule(
        seeded_db,
        user_id,
        [FixedScheduleEntry("월", ["09:00"]), FixedScheduleEntry("월", ["09:00", "09:30"])],
    )
    assert read_fixed_schedule(seeded_db, user_id) == [
        FixedScheduleEntry("월", ["09:00", "09:30"])
    ]
