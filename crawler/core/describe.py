"""Static prose for compiled rooms and exits: nouns, doors, columns, water."""
from __future__ import annotations
import logging
from typing import Optional, Sequence

from config import WATER_FLOOD_CELLS
from ..rng import RandomSource, choice
from .model.base import Door, DoorType, Exit, Rect

__all__ = [
    "facing_direction",
    "room_noun",
    "describe_door",
    "describe_columns",
    "describe_water",
    "describe_room",
    "area_of",
]

_OPPOSITE = {"north": "south", "south": "north", "east": "west", "west": "east"}

_FLOOD_FLOURISHES = [
    ", flooding it up to ankle level",
    " as a large lake",
    " flowing as a stream",
    ", almost a river",
    ", making it nearly impassable",
    " in a thick muddy layer, making it difficult to walk",
    " turning the space into a shallow pool",
    ", gushing like a river",
]


def facing_direction(door: Door) -> Optional[str]:
    """Compass direction the door opens towards, from its ``dir`` vector."""
    if door.dir.x == -1:
        return "west"
    if door.dir.y == 1:
        return "south"
    if door.dir.x == 1:
        return "east"
    if door.dir.y == -1:
        return "north"
    return None


def room_noun(rect: Rect, exits: Sequence[Exit], rng: RandomSource) -> str:
    visible = [e for e in exits if e.description != "secret door"]
    if rect.is_1x1:
        n = len(visible)
        if n == 1:
            return "alcove"
        if n == 2:
            first, second = (e.towards for e in visible)
            if first is not None and _OPPOSITE.get(first) == second:
                return choice(rng, ["entranceway", "archway"])
            return "bend"
        if n == 3:
            return "three-way intersection"
        if n == 4:
            return "four-way intersection"
        return "dim passage"
    if rect.h == 1 or rect.w == 1:
        if rect.w == 2 or rect.h == 2:
            return "short hallway"
        if rect.w > 5 or rect.h > 5:
            return "long hallway"
        return "hallway"
    if rect.rotunda:
        return "round room"
    if rect.w == rect.h:
        return "square room"
    return "room"


def describe_door(door: Door, direction: Optional[str], destination: Rect, rng: RandomSource) -> str:
    facing = facing_direction(door) == direction
    t = door.type
    if t == DoorType.OPEN:
        return room_noun(destination, [], rng)
    if t == DoorType.DOOR:
        return "door"
    if t == DoorType.NARROW:
        return "narrow entrance to a " + room_noun(destination, [], rng)
    if t == DoorType.OUT:
        return "way out of the dungeon"
    if t == DoorType.PORTCULLIS:
        return "portcullis" if facing else "portcullis with a lever on the wall next to it"
    if t == DoorType.DOUBLE:
        return "double doors"
    if t == DoorType.SECRET:
        return "secret door" if facing else "door"
    if t == DoorType.STEEL:
        return "steel door"
    if t == DoorType.DOWN:
        return "broad stairs down"
    if t == DoorType.STAIRWELL:
        return f"stairs {'down' if facing else 'up'}"
    logging.warning(f"Unknown door type {t} at ({door.x}, {door.y})")
    return "portal"


def describe_columns(rect: Rect, columns: int) -> str:
    if not columns:
        return ""
    if rect.rotunda:
        return f"{columns} columns ring the center of the room. "
    return f"There are {columns} columns arranged in two rows of {columns // 2} here. "


def _coverage(percent: int, rng: RandomSource) -> str:
    if percent < 10:
        return "a small area"
    if percent <= 25:
        return choice(rng, ["part", "some"])
    if percent <= 50:
        return choice(rng, ["almost half", "some"])
    if percent <= 75:
        return choice(rng, ["more than half", "a good portion"])
    return choice(rng, ["a large area", "most", "almost all", "almost the entire"])


def describe_water(rect: Rect, cells: int, rng: RandomSource) -> str:
    if not cells:
        return ""
    area = rect.w * rect.h
    percent = (100 * cells) // area
    flood = choice(rng, _FLOOD_FLOURISHES) if cells >= WATER_FLOOD_CELLS else ""
    if percent == 100:
        basic = "Water covers the floor" if area <= 2 else "Water covers the entire floor"
    else:
        basic = f"Water covers {_coverage(percent, rng)} of the floor"
    here = " here" if rng.random() < 0.3 else ""
    return f"{basic}{here}{flood}. "


def describe_room(rect: Rect, exits: Sequence[Exit], columns: int, water: int, rng: RandomSource) -> str:
    noun = room_noun(rect, exits, rng)
    return f"{noun}. {describe_columns(rect, columns)}{describe_water(rect, water, rng)}".strip()


def area_of(rect: Rect) -> str:
    if rect.rotunda:
        return f"{rect.h}m across"
    return f"{rect.w}m x {rect.h}m"
