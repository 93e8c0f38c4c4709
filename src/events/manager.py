from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from src.db.sqlite_client import (
    create_member,
    delete_schedules_by_time_points,
    delete_schedules_by_times,
    ensure_participation,
    get_event,
    get_event_selections,
    get_member_by_name,
    get_members,
    get_participations,
    get_schedules,
    get_user,
    insert_schedules,
    replace_member_selections,
    replace_user_selections,
    update_event_times,
)
from src.db.sqlite_client import create_event as insert_event
from src.engine.availability import aggregate
from src.engine.errors import (
    EventNotFoundError,
    InvalidParticipantError,
    InvalidTimePointError,
    ParticipantNotFoundError,
    SlotsNotFoundError,
)
from src.engine.merger import AvailabilityWindow
from src.engine.participants import Member, Participant, Selection, User
from src.engine.selection_index import build_selection_index
from src.engine.slots import (
    Category,
    Slot,
    create_time_sets,
    generate_slots,
    is_date_format,
    sorted_time_points,
    time_point_key,
    to_minutes,
    validate_time_point,
)

PIN_PATTERN = re.compile(r"^\d{4}$")
CREATOR = "CREATOR"
PARTICIPANT = "PARTICIPANT"


def _require_event(conn: Any, event_id: int) -> dict[str, Any]:
    event = get_event(conn, event_id)
    if not event:
        raise EventNotFoundError()
    return event


def _check_ranges(category: Category, ranges: list[str]) -> list[str]:
    """Validate every range against the category; duplicates collapse in order."""
    if not ranges:
        raise InvalidTimePointError("At least one date or weekday is required.")
    for time_point in ranges:
        if is_date_format(time_point) != (category == Category.DATE):
            raise InvalidTimePointError(f"Ranges do not match the {category.value} category.")
        validate_time_point(category, time_point)
    return list(dict.fromkeys(ranges))


def create_event(
    conn: Any,
    title: str,
    category: Category,
    ranges: list[str],
    start_time: str,
    end_time: str,
    creator_user_id: int | None = None,
) -> int:
    ranges = _check_ranges(category, ranges)
    slots = generate_slots(category, ranges, start_time, end_time)
    event_id = insert_event(conn, title.strip(), category.value, start_time, end_time)
    insert_schedules(conn, event_id, [(slot.time_point, slot.time) for slot in slots])
    if creator_user_id is not None:
        ensure_participation(conn, event_id, creator_user_id, CREATOR)
    return event_id


def get_event_ranges(conn: Any, event_id: int) -> list[str]:
    event = _require_event(conn, event_id)
    category = Category(event["category"])
    return sorted_time_points(category, (row["time_point"] for row in get_schedules(conn, event_id)))


def validate_member_name(name: str) -> str | None:
    cleaned = " ".join(name.strip().split())
    if not cleaned:
        return "Name is required."
    if len(cleaned) > 50:
        return "Name must be at most 50 characters."
    return None


def join_event_as_member(conn: Any, event_id: int, name: str, pin: str) -> int:
    """Register a new member, or log an existing one back in with their PIN."""
    _require_event(conn, event_id)
    error = validate_member_name(name)
    if error:
        raise InvalidParticipantError(error)
    if not PIN_PATTERN.match(pin or ""):
        raise InvalidParticipantError("PIN must be 4 digits.")
    cleaned = " ".join(name.strip().split())
    existing = get_member_by_name(conn, event_id, cleaned)
    if existing:
        if str(existing["pin"]) != pin:
            raise InvalidParticipantError("PIN does not match.")
        return int(existing["id"])
    return create_member(conn, event_id, cleaned, pin)


def _resolve_schedule_ids(
    conn: Any,
    event_id: int,
    category: Category,
    submitted: Mapping[str, list[str]],
) -> list[int]:
    ids: list[int] = []
    for time_point, times in submitted.items():
        if is_date_format(time_point) != (category == Category.DATE):
            raise InvalidTimePointError(f"{time_point!r} does not match the event category.")
        schedules = get_schedules(conn, event_id, time_point)
        if not schedules:
            raise SlotsNotFoundError(f"No slots for {time_point!r}.")
        wanted = set(times)
        ids.extend(int(row["id"]) for row in schedules if row["time"] in wanted)
    return ids


def submit_member_schedules(
    conn: Any, event_id: int, member_id: int, submitted: Mapping[str, list[str]]
) -> None:
    event = _require_event(conn, event_id)
    if not any(int(m["id"]) == member_id for m in get_members(conn, event_id)):
        raise ParticipantNotFoundError()
    ids = _resolve_schedule_ids(conn, event_id, Category(event["category"]), submitted)
    replace_member_selections(conn, member_id, ids)


def submit_user_schedules(
    conn: Any, event_id: int, user_id: int, submitted: Mapping[str, list[str]]
) -> None:
    event = _require_event(conn, event_id)
    if not get_user(conn, user_id):
        raise ParticipantNotFoundError()
    ids = _resolve_schedule_ids(conn, event_id, Category(event["category"]), submitted)
    ensure_participation(conn, event_id, user_id, PARTICIPANT)
    replace_user_selections(conn, event_id, user_id, ids)


def get_roster(
    conn: Any,
    event_id: int,
    member_ids: Iterable[int] | None = None,
    user_ids: Iterable[int] | None = None,
) -> list[str]:
    """Member names followed by non-creator user nicknames."""
    members = get_members(conn, event_id)
    users = [p for p in get_participations(conn, event_id) if p["status"] != CREATOR]
    if member_ids is not None:
        wanted_members = set(member_ids)
        members = [m for m in members if int(m["id"]) in wanted_members]
    if user_ids is not None:
        wanted_users = set(user_ids)
        users = [u for u in users if int(u["user_id"]) in wanted_users]
    return [str(m["name"]) for m in members] + [str(u["nickname"]) for u in users]


def _row_to_selection(row: Mapping[str, Any]) -> Selection:
    participant: Participant | None = None
    if row.get("member_id") is not None:
        participant = Member(member_id=int(row["member_id"]), name=str(row["member_name"]))
    elif row.get("user_id") is not None:
        participant = User(user_id=int(row["user_id"]), nickname=str(row["user_nickname"]))
    return Selection(participant=participant, slot=Slot(row["time_point"], row["time"]))


def _chronological(rows: list[dict[str, Any]], category: Category) -> list[dict[str, Any]]:
    point_key = time_point_key(category)
    return sorted(rows, key=lambda r: (point_key(r["time_point"]), to_minutes(r["time"])))


def _most_possible_times(
    conn: Any,
    event: Mapping[str, Any],
    roster: list[str],
    member_ids: list[int] | None = None,
    user_ids: list[int] | None = None,
) -> list[AvailabilityWindow]:
    category = Category(event["category"])
    rows = get_event_selections(conn, int(event["id"]), member_ids, user_ids)
    index = build_selection_index(_row_to_selection(row) for row in _chronological(rows, category))
    return aggregate(index, roster, category)


def get_most_possible_times(conn: Any, event_id: int) -> list[AvailabilityWindow]:
    event = _require_event(conn, event_id)
    return _most_possible_times(conn, event, get_roster(conn, event_id))


def get_filtered_most_possible_times(
    conn: Any, event_id: int, member_ids: list[int], user_ids: list[int]
) -> list[AvailabilityWindow]:
    event = _require_event(conn, event_id)
    if not member_ids and not user_ids:
        return []
    roster = get_roster(conn, event_id, member_ids, user_ids)
    return _most_possible_times(conn, event, roster, member_ids, user_ids)


def modify_event(
    conn: Any,
    event_id: int,
    ranges: list[str],
    start_time: str,
    end_time: str,
) -> None:
    """Apply new ranges and times, keeping selections on slots that survive."""
    event = _require_event(conn, event_id)
    category = Category(event["category"])
    ranges = _check_ranges(category, ranges)
    new_times = create_time_sets(start_time, end_time)
    schedules = get_schedules(conn, event_id)
    existing_points = {row["time_point"] for row in schedules}
    existing_times = {row["time"] for row in schedules}
    wanted_points = set(ranges)
    wanted_times = set(new_times)

    kept_points = [p for p in sorted_time_points(category, existing_points) if p in wanted_points]
    added_points = [p for p in ranges if p not in existing_points]
    added_times = [t for t in new_times if t not in existing_times]
    new_slots = [
        (slot.time_point, slot.time)
        for point in kept_points
        for slot in generate_slots(category, [point], start_time, end_time)
        if slot.time in added_times
    ]
    if added_points:
        new_slots.extend(
            (slot.time_point, slot.time)
            for slot in generate_slots(category, added_points, start_time, end_time)
        )

    delete_schedules_by_time_points(
        conn, event_id, [p for p in existing_points if p not in wanted_points]
    )
    delete_schedules_by_times(conn, event_id, [t for t in existing_times if t not in wanted_times])
    insert_schedules(conn, event_id, new_slots)
    update_event_times(conn, event_id, start_time, end_time)
