from __future__ import annotations

from src.engine.merger import can_extend, extend, impossible_names, open_window
from src.engine.slots import Slot


def test_open_window_spans_one_slot():
    window = open_window(Slot("월", "09:00"), ["Ann"], ["Ann", "Ben"])
    assert window.to_dict() == {
        "time_point": "월",
        "start_time": "09:00",
        "end_time": "09:30",
        "possible_count": 1,
        "possible_names": ["Ann"],
        "impossible_names": ["Ben"],
    }


def test_can_extend_requires_contiguity_same_point_and_names():
    window = open_window(Slot("월", "09:00"), ["Ann", "Ben"], ["Ann", "Ben"])
    assert can_extend(window, Slot("월", "09:30"), ["Ben", "Ann"])
    assert not can_extend(window, Slot("월", "10:00"), ["Ann", "Ben"])
    assert not can_extend(window, Slot("화", "09:30"), ["Ann", "Ben"])
    assert not can_extend(window, Slot("월", "09:30"), ["Ann", "Cat"])
    assert not can_extend(None, Slot("월", "09:30"), ["Ann"])


def test_extend_moves_end_only():
    window = open_window(Slot("2024.12.10", "09:00"), ["Ann"], ["Ann"])
    extended = extend(window, Slot("2024.12.10", "09:30"))
    assert (extended.start_time, extended.end_time) == ("09:00", "10:00")
    assert window.end_time == "09:30"


def test_impossible_names_consumes_one_roster_entry_per_responder():
    roster = ["Ann", "Ann", "Ben"]
    assert impossible_names(roster, ["Ann"]) == ["Ann", "Ben"]
    assert impossible_names(roster, ["Ann", "Ann", "Ben"]) == []
