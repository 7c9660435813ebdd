"""Data model definitions for a compiled dungeon.

This module only contains pure dataclasses without compilation or validation
logic. They are immutable structural representations of the dungeon graph.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple, Union

from .notes import DoorNote, Note

__all__ = [
    "DoorType",
    "EXIT_DIRECTIONS",
    "OUTSIDE",
    "Direction",
    "Rect",
    "Door",
    "Exit",
    "Room",
    "Agent",
    "Dungeon",
]

EXIT_DIRECTIONS = ("north", "east", "south", "west")
OUTSIDE = "outside"


class DoorType(IntEnum):
    OPEN = 0
    DOOR = 1
    NARROW = 2
    OUT = 3
    PORTCULLIS = 4
    DOUBLE = 5
    SECRET = 6
    STEEL = 7
    DOWN = 8
    STAIRWELL = 9


@dataclass(frozen=True)
class Direction:
    x: int
    y: int


@dataclass(frozen=True)
class Rect:
    id: int
    x: int
    y: int
    w: int
    h: int
    ending: bool = False
    rotunda: bool = False

    @property
    def is_1x1(self) -> bool:
        return self.w == 1 and self.h == 1

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.w and self.y <= y < self.y + self.h


@dataclass(frozen=True)
class Door:
    id: int
    x: int
    y: int
    dir: Direction
    type: int


@dataclass(frozen=True)
class Exit:
    towards: Optional[str]
    to: Union[int, str]
    is_facing: bool
    door: Optional[Door]
    type: Optional[int]
    description: str
    cell: Tuple[int, int]
    note: Optional[DoorNote] = None


@dataclass(frozen=True)
class Room:
    id: int
    description: str
    area: str
    exits: Tuple[Exit, ...]
    notes: Tuple[Note, ...]
    x: int
    y: int
    w: int
    h: int
    ending: bool = False
    rotunda: bool = False


@dataclass(frozen=True)
class Agent:
    id: int
    name: str
    cls: str
    room: int


@dataclass(frozen=True)
class Dungeon:
    version: str
    title: str
    story: str
    rects: Tuple[Rect, ...]
    doors: Tuple[Door, ...]
    rooms: Tuple[Room, ...]
    seed: Optional[int] = None

    def find_room(self, room_id: int) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None
