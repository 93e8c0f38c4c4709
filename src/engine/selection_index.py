from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.engine.participants import Member, Selection, User, display_name
from src.engine.slots import Slot


@dataclass
class SelectionIndex:
    """Slot -> responder names, kept in first-seen slot order.

    The aggregator walks ``slots`` in this order and relies on it matching the
    order slots were generated in (time point major, time minor).
    """

    slots: dict[Slot, list[str]] = field(default_factory=dict)
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.slots)

    def max_count(self) -> int:
        return max((len(names) for names in self.slots.values()), default=0)


def build_selection_index(selections: Iterable[Selection]) -> SelectionIndex:
    index = SelectionIndex()
    for selection in selections:
        if selection.slot is None or not isinstance(selection.participant, (Member, User)):
            index.skipped += 1
            continue
        index.slots.setdefault(selection.slot, []).append(display_name(selection.participant))
    return index
