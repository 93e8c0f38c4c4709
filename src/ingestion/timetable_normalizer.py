"""Normalize the third-party class timetable feed into weekday slot lists.

The feed is undocumented XML of roughly this shape::

    <table status="1">
      <subject>
        <time><data day="0" starttime="108" endtime="120" /></time>
      </subject>
    </table>

``day`` is 0 (Monday) through 6 (Sunday); ``starttime``/``endtime`` count
5 minute units from midnight. Bad class entries are skipped and counted;
a payload with no usable structure raises a typed error instead.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from src.config.settings import load_settings
from src.engine.errors import (
    CommontimeError,
    TimetableEmptyError,
    TimetableNotPublicError,
    TimetableParseError,
)
from src.engine.fixed_schedule import FixedScheduleEntry
from src.engine.slots import (
    MINUTES_IN_DAY,
    SLOT_MINUTES,
    WEEKDAYS,
    format_minutes,
    sorted_weekday_labels,
)
from src.ingestion.everytime_client import fetch_timetable
from src.ingestion.feed_config import load_feed_config
from src.utils.log import log_line

PRIVATE_STATUS = -2
PUBLIC_STATUS = 1
UNIT_MINUTES = 5

STATUS_PATTERN = re.compile(r'status="(-?\d+)"')
INT_PATTERN = re.compile(r"[+-]?[0-9]+")
DAY_CODES = {str(idx): label for idx, label in enumerate(WEEKDAYS)}


@dataclass
class NormalizedTimetable:
    schedules: list[FixedScheduleEntry] = field(default_factory=list)
    discarded: int = 0

    def as_mapping(self) -> dict[str, list[str]]:
        return {entry.time_point: list(entry.times) for entry in self.schedules}


def extract_status(raw: str) -> int | None:
    match = STATUS_PATTERN.search(raw)
    if not match:
        return None
    return int(match.group(1))


def ensure_has_subjects(raw: str) -> None:
    """Raise the typed failure matching a payload that lists no classes."""
    if "subject" in raw:
        return
    status = extract_status(raw)
    if status == PRIVATE_STATUS:
        raise TimetableNotPublicError()
    if status == PUBLIC_STATUS:
        raise TimetableEmptyError()
    raise TimetableParseError(f"Unrecognized timetable status {status!r}.")


def day_code_to_label(code: str | None) -> str | None:
    if code is None:
        return None
    return DAY_CODES.get(code)


def _parse_int(raw: str) -> int | None:
    if not INT_PATTERN.fullmatch(raw):
        return None
    return int(raw)


def parse_minutes(raw_start: str | None, raw_end: str | None) -> tuple[int, int] | None:
    if not raw_start or not raw_end:
        return None
    start_units = _parse_int(raw_start)
    end_units = _parse_int(raw_end)
    if start_units is None or end_units is None:
        return None
    start = start_units * UNIT_MINUTES
    end = end_units * UNIT_MINUTES
    if start >= end or start < 0 or end > MINUTES_IN_DAY:
        return None
    return start, end


def expand_slot_times(start: int, end: int) -> list[str]:
    return [format_minutes(minute) for minute in range(start, end, SLOT_MINUTES)]


def parse_timetable(raw: str) -> NormalizedTimetable:
    ensure_has_subjects(raw)
    times_by_day: dict[str, set[str]] = {}
    discarded = 0
    try:
        soup = BeautifulSoup(raw, "html.parser")
        for subject in soup.find_all("subject"):
            for data in subject.select("time > data"):
                label = day_code_to_label(data.get("day"))
                span = parse_minutes(data.get("starttime"), data.get("endtime"))
                if label is None or span is None:
                    discarded += 1
                    continue
                times_by_day.setdefault(label, set()).update(expand_slot_times(*span))
    except Exception as exc:
        raise TimetableParseError() from exc

    schedules = [
        FixedScheduleEntry(time_point=label, times=sorted(times_by_day[label]))
        for label in sorted_weekday_labels(times_by_day)
    ]
    return NormalizedTimetable(schedules=schedules, discarded=discarded)


def _default_fetch() -> Callable[[str], str]:
    settings = load_settings()
    config = load_feed_config(
        settings.timetable_feed_config_path, settings.timetable_timeout_seconds
    )
    return lambda identifier: fetch_timetable(identifier, config)


def normalize_external_timetable(
    identifier: str,
    fetch: Callable[[str], str] | None = None,
) -> list[FixedScheduleEntry]:
    raw = (fetch or _default_fetch())(identifier)
    try:
        result = parse_timetable(raw)
    except CommontimeError as exc:
        log_line(
            "TIMETABLE", "failed", level="WARNING", identifier=identifier, error=exc.code
        )
        raise
    log_line(
        "TIMETABLE",
        "success",
        identifier=identifier,
        days=len(result.schedules),
        discarded=result.discarded,
    )
    return result.schedules
