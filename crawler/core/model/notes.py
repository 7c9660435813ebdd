"""Typed room annotations.

A note is one of the variants below, discriminated by ``kind``. Variant
fields are only meaningful after an ``isinstance`` (or ``kind``) check.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple

__all__ = [
    "NoteKind",
    "ITEM_KINDS",
    "REAR_NOTE_ID",
    "Note",
    "ContainerNote",
    "SecretNote",
    "ItemNote",
    "DoorNote",
    "CuriousNote",
]

# Id of the first half of a split "rear entrance. <more>" note
REAR_NOTE_ID = -1


class NoteKind(str, Enum):
    NONE = "none"
    CONTAINER = "container"
    SECRET = "secret"
    BODY = "body"
    REMAINS = "remains"
    CORPSE = "corpse"
    DYING = "dying"
    FEATURE = "feature"
    HOVERING = "hovering"
    ITEM = "item"
    DOOR = "door"
    CURIOUS = "curious"


ITEM_KINDS = frozenset({
    NoteKind.BODY,
    NoteKind.REMAINS,
    NoteKind.CORPSE,
    NoteKind.DYING,
    NoteKind.FEATURE,
    NoteKind.HOVERING,
    NoteKind.ITEM,
})


@dataclass(frozen=True)
class Note:
    id: int
    text: str
    ref: str = ""
    pos: Tuple[float, float] = (0, 0)
    kind: NoteKind = NoteKind.NONE
    # Named groups the classifying pattern captured (unmatched groups left out)
    groups: Mapping[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class ContainerNote(Note):
    container: str = ""
    items: Tuple[str, ...] = ()
    message: str = ""
    imperative: str = ""
    pristine: str = ""
    empty: str = ""
    kind: NoteKind = field(default=NoteKind.CONTAINER, init=False)


@dataclass(frozen=True)
class SecretNote(Note):
    hidden: str = ""
    items: Tuple[str, ...] = ()
    message: str = ""
    kind: NoteKind = field(default=NoteKind.SECRET, init=False)


@dataclass(frozen=True)
class ItemNote(Note):
    """Body, remains, corpse, dying, feature, hovering or loose item; ``kind`` tells which."""
    holder: str = ""
    items: Tuple[str, ...] = ()
    message: str = ""
    pristine: str = ""
    empty: str = ""


@dataclass(frozen=True)
class DoorNote(Note):
    door: str = ""
    direction: str = ""
    keyholes: Optional[str] = None
    kind: NoteKind = field(default=NoteKind.DOOR, init=False)


@dataclass(frozen=True)
class CuriousNote(Note):
    feature: str = ""
    object: str = ""
    action: str = ""
    trigger: str = ""
    message: str = ""
    imperative: str = ""
    pristine: str = ""
    items: Tuple[str, ...] = ()
    vanishes: bool = False
    teleports: bool = False
    kind: NoteKind = field(default=NoteKind.CURIOUS, init=False)

    @property
    def effect(self) -> str:
        if self.teleports:
            return "teleport"
        if self.items:
            return "spawn"
        if self.vanishes:
            return "gone"
        return "none"
