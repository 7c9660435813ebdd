"""Dungeon compilation and validation utilities.

Separates construction logic from the raw One-Page Dungeon JSON (dict) into
model dataclasses. No I/O performed here; caller is responsible for reading
JSON from disk.
"""
from __future__ import annotations
import logging
import math
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import get_seed
from ...rng import RandomSource
from ...text import decapitalize, strip_article
from ..describe import area_of, describe_door, describe_room, facing_direction, room_noun
from ..model.base import OUTSIDE, Direction, Door, DoorType, Dungeon, Exit, Rect, Room
from ..model.notes import DoorNote, Note
from ..notes import classify_all

__all__ = ["DungeonGeometryError", "compile_dungeon", "validate_dungeon", "is_adjacent", "clockwise_key"]


class DungeonGeometryError(ValueError):
    """Raised by strict compilation when rects do not form a sane graph."""


def is_adjacent(a: Rect, b: Rect) -> bool:
    """True if exactly one of the pair is 1x1 and it touches one edge of the other."""
    if not a.is_1x1 and not b.is_1x1:
        return False
    if not b.is_1x1:
        return is_adjacent(b, a)
    right = a.x + a.w
    bottom = a.y + a.h
    if b.y == a.y - 1 or b.y == bottom:
        return a.x <= b.x < right
    if b.x == right or b.x == a.x - 1:
        return a.y <= b.y < bottom
    return False


def _touching(a: Rect, b: Rect) -> bool:
    """Two larger rooms sharing an edge with no connector cell between them."""
    overlap_x = a.x < b.x + b.w and b.x < a.x + a.w
    overlap_y = a.y < b.y + b.h and b.y < a.y + a.h
    if overlap_y and (a.x + a.w == b.x or b.x + b.w == a.x):
        return True
    return overlap_x and (a.y + a.h == b.y or b.y + b.h == a.y)


def _direction(frm: Rect, to: Rect) -> Optional[str]:
    if to.x + to.w == frm.x:
        return "west"
    if to.x == frm.x + frm.w:
        return "east"
    if to.y + to.h == frm.y:
        return "north"
    if to.y == frm.y + frm.h:
        return "south"
    return None


def clockwise_key(room: Room | Rect) -> Callable[[Exit], float]:
    """Sort key ordering exits clockwise by the angle of their cell from the room's corner."""
    def key(exit: Exit) -> float:
        return math.atan2(exit.cell[1] - room.y, exit.cell[0] - room.x)
    return key


def _anomaly(message: str, strict: bool) -> None:
    if strict:
        raise DungeonGeometryError(message)
    logging.warning(message)


def _build_doors(rects: Tuple[Rect, ...], raw_doors: List[Dict[str, Any]]) -> Tuple[Door, ...]:
    by_pos: Dict[Tuple[int, int], Dict[str, Any]] = {}
    for d in raw_doors:
        by_pos.setdefault((d["x"], d["y"]), d)
    doors: List[Door] = []
    for rect in rects:
        raw = by_pos.get((rect.x, rect.y))
        if raw is None or not rect.is_1x1:
            continue
        dir_ = raw.get("dir", {})
        door_type = raw.get("type", DoorType.DOOR)
        try:
            door_type = DoorType(door_type)
        except ValueError:
            logging.warning(f"Door at ({rect.x}, {rect.y}) has unknown type {door_type}")
        doors.append(Door(
            id=rect.id,
            x=rect.x,
            y=rect.y,
            dir=Direction(x=dir_.get("x", 0), y=dir_.get("y", 0)),
            type=door_type,
        ))
    return tuple(doors)


def _build_exits(
    rect: Rect,
    rects: Tuple[Rect, ...],
    door_at: Dict[int, Door],
    notes: List[Note],
    rng: RandomSource,
    strict: bool,
) -> List[Exit]:
    exits: List[Exit] = []
    for other in rects:
        if other.id == rect.id or not is_adjacent(rect, other):
            continue
        direction = _direction(rect, other)
        if direction is None:
            _anomaly(f"Rect {other.id} touches room {rect.id} but no direction could be derived", strict)
        door = door_at.get(other.id)
        if door is None:
            exits.append(Exit(
                towards=direction,
                to=other.id,
                is_facing=False,
                door=None,
                type=None,
                description=room_noun(other, [], rng),
                cell=(other.x, other.y),
            ))
            continue
        neighbours = [
            r for r in rects
            if r.id not in (rect.id, other.id) and r.id not in door_at and is_adjacent(r, other)
        ]
        if len(neighbours) > 1:
            _anomaly(f"Door {door.id} touches {len(neighbours) + 1} rooms, using room {neighbours[0].id}", strict)
        destination = neighbours[0] if neighbours else None
        is_facing = facing_direction(door) == direction
        note: Optional[DoorNote] = None
        if is_facing and door.type == DoorType.DOUBLE:
            note = next((n for n in notes if isinstance(n, DoorNote) and n.direction == direction), None)
        if destination is None:
            description = "way out of the dungeon"
        elif note is not None:
            description = strip_article(decapitalize(note.door))
        else:
            description = describe_door(door, direction, destination, rng)
        exits.append(Exit(
            towards=direction,
            to=destination.id if destination else OUTSIDE,
            is_facing=is_facing,
            door=door,
            type=door.type,
            description=description,
            cell=(door.x, door.y),
            note=note,
        ))
    exits.sort(key=clockwise_key(rect))
    return exits


def compile_dungeon(
    data: Dict[str, Any],
    rng: Optional[RandomSource] = None,
    strict: bool = False,
) -> Dungeon:
    """Compile a One-Page Dungeon document into an immutable ``Dungeon``.

    Ids come from input order. All flavour randomness is drawn from ``rng``;
    when omitted a ``random.Random`` seeded from the document (or the
    configured default seed) is used, so compiling twice gives equal results.
    With ``strict=True`` malformed geometry raises ``DungeonGeometryError``
    instead of being logged and tolerated.
    """
    if rng is None:
        seed = data.get("seed")
        rng = random.Random(get_seed() if seed is None else seed)

    rects = tuple(
        Rect(
            id=i,
            x=r["x"],
            y=r["y"],
            w=r["w"],
            h=r["h"],
            ending=bool(r.get("ending", False)),
            rotunda=bool(r.get("rotunda", False)),
        )
        for i, r in enumerate(data.get("rects", []))
    )
    doors = _build_doors(rects, data.get("doors", []))
    door_at = {d.id: d for d in doors}

    raw_notes = [
        dict(n, id=i, pos=(n.get("pos", {}).get("x", 0), n.get("pos", {}).get("y", 0)))
        for i, n in enumerate(data.get("notes", []))
    ]
    columns = [(c["x"], c["y"]) for c in data.get("columns", [])]
    water = [(w["x"], w["y"]) for w in data.get("water", [])]

    room_rects = [r for r in rects if r.id not in door_at]
    for i, a in enumerate(room_rects):
        for b in room_rects[i + 1:]:
            if not a.is_1x1 and not b.is_1x1 and _touching(a, b):
                _anomaly(f"Rooms {a.id} and {b.id} share an edge without a connector", strict)

    rooms: List[Room] = []
    for rect in room_rects:
        notes = classify_all([n for n in raw_notes if rect.contains(*n["pos"])])
        exits = _build_exits(rect, rects, door_at, notes, rng, strict)
        n_columns = sum(1 for c in columns if rect.contains(*c))
        n_water = sum(1 for w in water if rect.contains(*w))
        rooms.append(Room(
            id=rect.id,
            description=describe_room(rect, exits, n_columns, n_water, rng),
            area=area_of(rect),
            exits=tuple(exits),
            notes=tuple(notes),
            x=rect.x,
            y=rect.y,
            w=rect.w,
            h=rect.h,
            ending=rect.ending,
            rotunda=rect.rotunda,
        ))
    logging.info(f"Compiled '{data.get('title', '')}': {len(rooms)} rooms, {len(doors)} doors")
    return Dungeon(
        version=str(data.get("version", "")),
        title=data.get("title", ""),
        story=data.get("story", ""),
        rects=rects,
        doors=doors,
        rooms=tuple(rooms),
        seed=data.get("seed"),
    )


def validate_dungeon(dungeon: Dungeon) -> List[str]:
    issues: List[str] = []
    if not dungeon.rooms:
        issues.append("Dungeon has no rooms")
    room_ids = set()
    for room in dungeon.rooms:
        if room.id in room_ids:
            issues.append(f"Duplicate room id {room.id}")
        room_ids.add(room.id)
    door_ids = {d.id for d in dungeon.doors}
    for room in dungeon.rooms:
        for ex in room.exits:
            if ex.towards is None:
                issues.append(f"Room {room.id} has exit with unknown direction")
            if ex.to != OUTSIDE and ex.to not in room_ids:
                issues.append(f"Exit from room {room.id} points to missing room {ex.to}")
            if ex.door is not None and ex.door.id not in door_ids:
                issues.append(f"Exit from room {room.id} uses unknown door {ex.door.id}")
    return issues
