from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from src.engine.slots import Slot


@dataclass(frozen=True)
class Member:
    """Anonymous, event-scoped participant protected by a PIN."""

    member_id: int
    name: str


@dataclass(frozen=True)
class User:
    """Authenticated participant with a global identity."""

    user_id: int
    nickname: str


Participant = Union[Member, User]


def display_name(participant: Participant) -> str:
    if isinstance(participant, Member):
        return participant.name
    return participant.nickname


@dataclass(frozen=True)
class Selection:
    """One participant claiming availability at one slot."""

    participant: Participant | None
    slot: Slot | None
