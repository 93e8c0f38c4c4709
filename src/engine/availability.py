"""Finds the slots where the most participants overlap and merges them into windows."""

from __future__ import annotations

from src.engine.merger import AvailabilityWindow, can_extend, extend, open_window
from src.engine.selection_index import SelectionIndex
from src.engine.slots import Category, time_point_key, to_minutes
from src.utils.log import log_line

MAX_MOST_POSSIBLE_TIMES = 6


def aggregate(
    index: SelectionIndex,
    roster: list[str],
    category: Category,
    limit: int = MAX_MOST_POSSIBLE_TIMES,
) -> list[AvailabilityWindow]:
    """Return up to ``limit`` merged windows where the most participants overlap."""
    max_count = index.max_count()
    if max_count == 0:
        return []

    windows: list[AvailabilityWindow] = []
    current: AvailabilityWindow | None = None
    for slot, names in index.slots.items():
        if len(names) != max_count:
            continue
        if current is not None and can_extend(current, slot, names):
            current = extend(current, slot)
            windows[-1] = current
            continue
        if len(windows) == limit:
            break
        current = open_window(slot, names, roster)
        windows.append(current)

    log_line(
        "AVAILABILITY",
        "aggregated",
        level="DEBUG",
        slots=len(index),
        max_count=max_count,
        windows=len(windows),
        skipped=index.skipped,
    )
    return sort_windows(windows, category)


def sort_windows(windows: list[AvailabilityWindow], category: Category) -> list[AvailabilityWindow]:
    point_key = time_point_key(category)
    return sorted(windows, key=lambda w: (point_key(w.time_point), to_minutes(w.start_time)))
