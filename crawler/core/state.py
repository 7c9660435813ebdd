"""Game state overlay for runtime mutable data.

Kept separate from the compiled dungeon, which is never modified. Statuses
only ever grow: nothing removes a status once added.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set

from .dungeon import Agent

DOOR_STATUSES: FrozenSet[str] = frozenset({"discovered", "unlocked", "open"})
ROOM_STATUSES: FrozenSet[str] = frozenset({"visited", "searched"})
NOTE_STATUSES: FrozenSet[str] = frozenset({"searched", "used", "gone"})


def _check(statuses, allowed: FrozenSet[str], owner: str) -> None:
    unknown = set(statuses) - allowed
    if unknown:
        raise ValueError(f"Unknown {owner} status {sorted(unknown)}")


@dataclass
class DoorState:
    id: int
    statuses: Set[str] = field(default_factory=set)

    def add(self, *statuses: str) -> None:
        _check(statuses, DOOR_STATUSES, "door")
        self.statuses.update(statuses)


@dataclass
class RoomState:
    id: int
    statuses: Set[str] = field(default_factory=set)
    notes: Dict[int, Set[str]] = field(default_factory=dict)

    def add(self, *statuses: str) -> None:
        _check(statuses, ROOM_STATUSES, "room")
        self.statuses.update(statuses)

    def add_note_status(self, note_id: int, *statuses: str) -> None:
        _check(statuses, NOTE_STATUSES, "note")
        self.notes.setdefault(note_id, set()).update(statuses)

    def note_statuses(self, note_id: int) -> Set[str]:
        return self.notes.get(note_id, set())


@dataclass
class GameState:
    id: int = 0
    turn: int = 0
    action: Optional[str] = None
    message: str = ""
    error: Optional[str] = None
    end: bool = False
    doors: Dict[int, DoorState] = field(default_factory=dict)
    rooms: Dict[int, RoomState] = field(default_factory=dict)
    inventory: List[str] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)

    def door(self, door_id: int) -> DoorState:
        """DoorState for ``door_id``, created empty on first use."""
        return self.doors.setdefault(door_id, DoorState(id=door_id))

    def room(self, room_id: int) -> RoomState:
        return self.rooms.setdefault(room_id, RoomState(id=room_id))

    def door_statuses(self, door_id: int) -> Set[str]:
        door = self.doors.get(door_id)
        return door.statuses if door else set()

    def room_statuses(self, room_id: int) -> Set[str]:
        room = self.rooms.get(room_id)
        return room.statuses if room else set()

    def note_statuses(self, room_id: int, note_id: int) -> Set[str]:
        room = self.rooms.get(room_id)
        return room.note_statuses(note_id) if room else set()
