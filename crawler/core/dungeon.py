"""Facade for dungeon model & loader.

Re-exports dataclasses and the compile/validate functions from the internal
modules to provide a stable import surface.
"""
from .model.base import (
    EXIT_DIRECTIONS,
    OUTSIDE,
    Agent,
    Direction,
    Door,
    DoorType,
    Dungeon,
    Exit,
    Rect,
    Room,
)
from .model.notes import (
    ContainerNote,
    CuriousNote,
    DoorNote,
    ItemNote,
    Note,
    NoteKind,
    SecretNote,
)
from .loader.dungeon_loader import DungeonGeometryError, compile_dungeon, validate_dungeon

__all__ = [
    "EXIT_DIRECTIONS",
    "OUTSIDE",
    "Agent",
    "Direction",
    "Door",
    "DoorType",
    "Dungeon",
    "Exit",
    "Rect",
    "Room",
    "ContainerNote",
    "CuriousNote",
    "DoorNote",
    "ItemNote",
    "Note",
    "NoteKind",
    "SecretNote",
    "DungeonGeometryError",
    "compile_dungeon",
    "validate_dungeon",
]
