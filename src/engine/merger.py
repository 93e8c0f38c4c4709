"""Decides whether a max-count slot continues the window emitted before it."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from src.engine.slots import Slot, add_thirty_minutes


@dataclass(frozen=True)
class AvailabilityWindow:
    time_point: str
    start_time: str
    end_time: str
    possible_names: list[str] = field(default_factory=list)
    impossible_names: list[str] = field(default_factory=list)

    @property
    def possible_count(self) -> int:
        return len(self.possible_names)

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_point": self.time_point,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "possible_count": self.possible_count,
            "possible_names": list(self.possible_names),
            "impossible_names": list(self.impossible_names),
        }


def open_window(slot: Slot, names: list[str], roster: list[str]) -> AvailabilityWindow:
    return AvailabilityWindow(
        time_point=slot.time_point,
        start_time=slot.time,
        end_time=add_thirty_minutes(slot.time),
        possible_names=list(names),
        impossible_names=impossible_names(roster, names),
    )


def impossible_names(roster: list[str], names: list[str]) -> list[str]:
    """Roster entries not accounted for by ``names``, in roster order.

    Each responder name consumes one matching roster entry, so a Member and a
    User sharing a display name are not both marked available.
    """
    remaining = list(names)
    out: list[str] = []
    for name in roster:
        if name in remaining:
            remaining.remove(name)
        else:
            out.append(name)
    return out


def can_extend(window: AvailabilityWindow | None, slot: Slot, names: list[str]) -> bool:
    if window is None:
        return False
    return (
        window.time_point == slot.time_point
        and window.end_time == slot.time
        and set(window.possible_names).issuperset(names)
    )


def extend(window: AvailabilityWindow, slot: Slot) -> AvailabilityWindow:
    return replace(window, end_time=add_thirty_minutes(slot.time))
