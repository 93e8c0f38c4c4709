"""Slot vocabulary shared by event schedules, fixed schedules and imported timetables.

A slot is a time point (a ``YYYY.MM.DD`` date or a weekday label) crossed with
a ``HH:MM`` clock time on a 30 minute grid. The same string formats are used
on the wire regardless of where a slot came from.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import cast

from dateutil import parser as date_parser

from src.engine.errors import InvalidTimePointError, InvalidTimeRangeError

SLOT_MINUTES = 30
MINUTES_IN_DAY = 24 * 60

WEEKDAYS = ("월", "화", "수", "목", "금", "토", "일")
WEEKDAY_ORDER = {label: idx for idx, label in enumerate(WEEKDAYS)}

DATE_PATTERN = re.compile(r"^\d{4}\.\d{2}\.\d{2}$")
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})$")


class Category(str, Enum):
    DATE = "DATE"
    DAY = "DAY"


@dataclass(frozen=True)
class Slot:
    time_point: str
    time: str


def is_date_format(value: str) -> bool:
    return bool(value) and value[0].isdigit()


def parse_date_point(value: str) -> datetime:
    """Parse a ``YYYY.MM.DD`` time point, rejecting anything else."""
    if not DATE_PATTERN.match(value or ""):
        raise InvalidTimePointError(f"Expected YYYY.MM.DD, got {value!r}.")
    try:
        return cast(datetime, date_parser.parse(value.replace(".", "-")))
    except (ValueError, OverflowError) as exc:
        raise InvalidTimePointError(f"Invalid calendar date {value!r}.") from exc


def validate_time_point(category: Category, value: str) -> str:
    if category == Category.DATE:
        parse_date_point(value)
        return value
    if value not in WEEKDAY_ORDER:
        raise InvalidTimePointError(f"Expected one of {', '.join(WEEKDAYS)}, got {value!r}.")
    return value


def to_minutes(value: str) -> int:
    match = TIME_PATTERN.match(value or "")
    if not match:
        raise InvalidTimeRangeError(f"Expected HH:MM, got {value!r}.")
    hours, minutes = int(match.group(1)), int(match.group(2))
    total = hours * 60 + minutes
    if minutes >= 60 or total > MINUTES_IN_DAY:
        raise InvalidTimeRangeError(f"Out of range time {value!r}.")
    return total


def format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def add_thirty_minutes(value: str) -> str:
    return format_minutes(to_minutes(value) + SLOT_MINUTES)


def create_time_sets(start_time: str, end_time: str) -> list[str]:
    """Return slot start times from ``start_time`` up to but excluding ``end_time``."""
    start = to_minutes(start_time)
    end = to_minutes(end_time)
    if start >= end or start % SLOT_MINUTES or end % SLOT_MINUTES:
        raise InvalidTimeRangeError()
    return [format_minutes(minute) for minute in range(start, end, SLOT_MINUTES)]


def generate_slots(
    category: Category,
    ranges: Iterable[str],
    start_time: str,
    end_time: str,
) -> list[Slot]:
    times = create_time_sets(start_time, end_time)
    out: list[Slot] = []
    for time_point in dict.fromkeys(ranges):
        validate_time_point(category, time_point)
        out.extend(Slot(time_point=time_point, time=time) for time in times)
    return out


def time_point_key(category: Category) -> Callable[[str], object]:
    if category == Category.DATE:
        return parse_date_point
    return lambda label: WEEKDAY_ORDER.get(label, len(WEEKDAYS))


def sorted_time_points(category: Category, values: Iterable[str]) -> list[str]:
    return sorted(set(values), key=time_point_key(category))


def sorted_weekday_labels(values: Iterable[str]) -> list[str]:
    return sorted_time_points(Category.DAY, values)
