from __future__ import annotations

from src.engine.participants import Member, Selection, User
from src.engine.selection_index import build_selection_index
from src.engine.slots import Slot


def test_index_preserves_first_seen_slot_order(make_selections):
    selections = make_selections(
        {
            ("월", "10:00"): ["Ann"],
            ("월", "09:00"): ["Ben", "@Cat"],
        }
    )
    selections.append(Selection(participant=Member(9, "Dan"), slot=Slot("월", "10:00")))
    index = build_selection_index(selections)
    assert list(index.slots) == [Slot("월", "10:00"), Slot("월", "09:00")]
    assert index.slots[Slot("월", "10:00")] == ["Ann", "Dan"]
    assert index.slots[Slot("월", "09:00")] == ["Ben", "Cat"]
    assert index.max_count() == 2


def test_index_skips_selections_missing_a_side():
    selections = [
        Selection(participant=None, slot=Slot("월", "09:00")),
        Selection(participant=User(1, "Eve"), slot=None),
        Selection(participant=User(1, "Eve"), slot=Slot("월", "09:00")),
    ]
    index = build_selection_index(selections)
    assert index.skipped == 2
    assert index.slots == {Slot("월", "09:00"): ["Eve"]}


def test_empty_index_has_zero_max():
    index = build_selection_index([])
    assert len(index) == 0
    assert index.max_count() == 0
