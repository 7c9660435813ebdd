"""Tests for dungeon compilation: ids, adjacency, exits and prose."""

import random

import pytest

from crawler.core.dungeon import (
    OUTSIDE,
    ContainerNote,
    DoorType,
    DungeonGeometryError,
    Rect,
    compile_dungeon,
    validate_dungeon,
)
from crawler.core.loader.dungeon_loader import is_adjacent
from game.bootstrap import dungeons_dir, load_document


@pytest.fixture()
def document():
    return load_document(dungeons_dir() / "sample.json")


@pytest.fixture()
def dungeon(document):
    return compile_dungeon(document, rng=random.Random(7))


def exits_by_direction(room):
    return {e.towards: e for e in room.exits}


def test_ids_follow_input_order(dungeon):
    assert [r.id for r in dungeon.rooms] == [0, 2, 4, 6]
    assert [d.id for d in dungeon.doors] == [1, 3, 5, 7]
    assert dungeon.find_room(4).w == 3


def test_door_types(dungeon):
    types = {d.id: d.type for d in dungeon.doors}
    assert types == {1: DoorType.OUT, 3: DoorType.DOOR, 5: DoorType.SECRET, 7: DoorType.DOUBLE}


def test_start_room_exits(dungeon):
    room = dungeon.find_room(0)
    assert [e.towards for e in room.exits] == ["north", "east"]
    north, east = room.exits
    assert north.to == OUTSIDE
    assert north.description == "way out of the dungeon"
    assert east.to == 2
    assert east.description == "door"
    assert east.is_facing is True
    assert east.door.id == 3


def test_secret_door_depends_on_side(dungeon):
    above = exits_by_direction(dungeon.find_room(2))["south"]
    below = exits_by_direction(dungeon.find_room(4))["north"]
    assert above.is_facing is True
    assert above.description == "secret door"
    assert below.is_facing is False
    assert below.description == "door"


def test_double_door_uses_note(dungeon):
    west = exits_by_direction(dungeon.find_room(4))["west"]
    assert west.to == 6
    assert west.note is not None
    assert west.note.keyholes == "a keyhole"
    assert west.description == "battered wooden double door with a keyhole"
    back = exits_by_direction(dungeon.find_room(6))["east"]
    assert back.note is None
    assert back.description == "double doors"


def test_room_prose(dungeon):
    room = dungeon.find_room(6)
    assert room.area == "3m x 3m"
    assert room.ending is True
    assert room.description.startswith("square room.")
    assert "There are 4 columns arranged in two rows of 2 here." in room.description
    assert "Water covers" in dungeon.find_room(4).description


def test_notes_are_placed_by_position(dungeon):
    room = dungeon.find_room(0)
    assert len(room.notes) == 1
    assert isinstance(room.notes[0], ContainerNote)
    assert [n.id for n in dungeon.find_room(4).notes] == [2, 3]


def test_compile_is_deterministic(document):
    first = compile_dungeon(document, rng=random.Random(3))
    second = compile_dungeon(document, rng=random.Random(3))
    assert first == second
    assert compile_dungeon(document) == compile_dungeon(document)


def test_sample_validates(dungeon):
    assert validate_dungeon(dungeon) == []


class TestAdjacency:
    def test_cell_on_each_edge(self):
        room = Rect(id=0, x=0, y=0, w=3, h=3)
        assert is_adjacent(room, Rect(id=1, x=3, y=1, w=1, h=1))
        assert is_adjacent(room, Rect(id=1, x=-1, y=2, w=1, h=1))
        assert is_adjacent(room, Rect(id=1, x=0, y=-1, w=1, h=1))
        assert is_adjacent(Rect(id=1, x=2, y=3, w=1, h=1), room)

    def test_corner_is_not_adjacent(self):
        room = Rect(id=0, x=0, y=0, w=3, h=3)
        assert not is_adjacent(room, Rect(id=1, x=3, y=3, w=1, h=1))

    def test_two_large_rooms_are_never_adjacent(self):
        assert not is_adjacent(Rect(id=0, x=0, y=0, w=3, h=3), Rect(id=1, x=3, y=0, w=3, h=3))


def _touching_rooms():
    return {
        "title": "Twin Halls",
        "story": "",
        "rects": [{"x": 0, "y": 0, "w": 3, "h": 3}, {"x": 3, "y": 0, "w": 3, "h": 3}],
        "doors": [],
        "notes": [],
    }


def test_touching_rooms_are_tolerated_by_default():
    dungeon = compile_dungeon(_touching_rooms(), rng=random.Random(1))
    assert len(dungeon.rooms) == 2
    assert all(not r.exits for r in dungeon.rooms)


def test_touching_rooms_raise_when_strict():
    with pytest.raises(DungeonGeometryError):
        compile_dungeon(_touching_rooms(), rng=random.Random(1), strict=True)


def test_doorless_cell_is_a_plain_exit():
    data = {
        "title": "Alcove",
        "story": "",
        "rects": [{"x": 0, "y": 0, "w": 3, "h": 3}, {"x": 3, "y": 1, "w": 1, "h": 1}],
        "doors": [],
        "notes": [],
    }
    dungeon = compile_dungeon(data, rng=random.Random(1))
    big = dungeon.find_room(0)
    assert len(big.exits) == 1
    assert big.exits[0].to == 1
    assert big.exits[0].door is None
    assert big.exits[0].description == "dim passage"
    assert dungeon.find_room(1).description.startswith("alcove")


def test_unknown_door_type_is_kept(caplog):
    data = {
        "title": "Odd",
        "story": "",
        "rects": [
            {"x": 0, "y": 0, "w": 3, "h": 3},
            {"x": 3, "y": 1, "w": 1, "h": 1},
            {"x": 4, "y": 0, "w": 3, "h": 3},
        ],
        "doors": [{"x": 3, "y": 1, "dir": {"x": 1, "y": 0}, "type": 42}],
        "notes": [],
    }
    dungeon = compile_dungeon(data, rng=random.Random(1))
    east = dungeon.find_room(0).exits[0]
    assert east.type == 42
    assert east.description == "portal"
    assert "unknown type" in caplog.text
