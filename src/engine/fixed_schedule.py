from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.db.sqlite_client import (
    get_fixed_schedules_by_day,
    get_fixed_selections,
    get_user,
    replace_fixed_selections,
    seed_fixed_schedules,
)
from src.engine.errors import ParticipantNotFoundError, ReferenceDataMissingError
from src.engine.slots import WEEKDAYS, create_time_sets
from src.utils.log import log_line


@dataclass(frozen=True)
class FixedScheduleEntry:
    """Times on one weekday, shared by stored fixed schedules and imported timetables."""

    time_point: str
    times: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"time_point": self.time_point, "times": list(self.times)}


def coerce_entries(
    submitted: Iterable[FixedScheduleEntry] | Mapping[str, list[str]],
) -> list[FixedScheduleEntry]:
    if isinstance(submitted, Mapping):
        return [FixedScheduleEntry(day, list(times)) for day, times in submitted.items()]
    return list(submitted)


def group_by_time_point(rows: Iterable[Mapping[str, Any]]) -> list[FixedScheduleEntry]:
    grouped: dict[str, list[str]] = {}
    for row in rows:
        grouped.setdefault(str(row["day"]), []).append(str(row["time"]))
    return [FixedScheduleEntry(day, times) for day, times in grouped.items()]


def match_reference_times(
    reference: Iterable[Mapping[str, Any]], times: Iterable[str]
) -> list[int]:
    """Ids of reference slots whose time was submitted; unknown times are dropped."""
    wanted = set(times)
    return [int(row["id"]) for row in reference if row["time"] in wanted]


def seed_reference_slots(conn: Any, start_time: str = "00:00", end_time: str = "24:00") -> None:
    times = create_time_sets(start_time, end_time)
    seed_fixed_schedules(conn, [(day, time) for day in WEEKDAYS for time in times])


def _require_user(conn: Any, user_id: int) -> None:
    if not get_user(conn, user_id):
        raise ParticipantNotFoundError()


def consolidate_fixed_schedule(
    conn: Any,
    user_id: int,
    submitted: Iterable[FixedScheduleEntry] | Mapping[str, list[str]],
) -> None:
    """Replace the user's fixed schedule with ``submitted``."""
    _require_user(conn, user_id)
    selected_ids: list[int] = []
    dropped = 0
    for entry in coerce_entries(submitted):
        reference = get_fixed_schedules_by_day(conn, entry.time_point)
        if not reference:
            raise ReferenceDataMissingError(f"No fixed schedule slots for {entry.time_point!r}.")
        matched = match_reference_times(reference, entry.times)
        dropped += len(set(entry.times)) - len(matched)
        selected_ids.extend(matched)
    selected_ids = list(dict.fromkeys(selected_ids))
    replace_fixed_selections(conn, user_id, selected_ids)
    log_line(
        "FIXED",
        "replaced",
        user_id=user_id,
        slots=len(selected_ids),
        dropped=dropped or None,
    )


def read_fixed_schedule(conn: Any, user_id: int) -> list[FixedScheduleEntry]:
    _require_user(conn, user_id)
    return group_by_time_point(get_fixed_selections(conn, user_id))
