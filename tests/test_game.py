"""End-to-end tests of the turn pipeline through GameSession."""

import random

import pytest

from crawler.core.actions import GameError, game, is_action, transition
from crawler.core.dungeon import Agent, DoorType, compile_dungeon
from crawler.core.state import GameState
from game.bootstrap import dungeons_dir, load_dungeon


@pytest.fixture()
def dungeon():
    return load_dungeon(dungeons_dir() / "sample.json")


@pytest.fixture()
def session(dungeon):
    return game(dungeon)


def play(session, *actions):
    out = None
    for action in actions:
        out = session(action)
    return out


def two_rooms(door_type, dir_x=1, notes=()):
    """Two 3x3 rooms joined by one door cell east of room 0."""
    data = {
        "title": "Two Rooms",
        "story": "Just two rooms.",
        "rects": [
            {"x": 0, "y": 0, "w": 3, "h": 3},
            {"x": 3, "y": 1, "w": 1, "h": 1},
            {"x": 4, "y": 0, "w": 3, "h": 3},
        ],
        "doors": [{"x": 3, "y": 1, "dir": {"x": dir_x, "y": 0}, "type": door_type}],
        "notes": [{"text": text, "pos": pos} for text, pos in notes],
    }
    return compile_dungeon(data, rng=random.Random(1))


class TestInit:
    def test_init_shows_title_and_start_room(self, session):
        out = session("init")
        assert out.message == (
            "Crypt of the Drowned Dwarf\n"
            "A dwarven prospector went looking for silver under the hill and never came back. "
            "His hammer is said to be still down there."
        )
        assert out.room == 0
        assert out.turn == 1
        assert out.end is False
        assert out.error is None
        assert out.statuses == ["visited"]
        assert out.description == "You are in a 3m x 3m square room. There is a small wooden chest here."
        assert [e.description for e in out.exits] == [
            "To the north is a way out of the dungeon",
            "To the east is a door",
        ]

    def test_action_before_init_is_fatal(self, session):
        with pytest.raises(GameError):
            session("north")

    def test_dungeon_without_rooms_is_fatal(self):
        empty = compile_dungeon({"title": "", "story": "", "rects": [], "doors": [], "notes": []})
        with pytest.raises(GameError):
            game(empty)("init")

    def test_missing_room_is_fatal(self, dungeon):
        with pytest.raises(GameError):
            transition(dungeon, GameState(id=99, turn=3), "search")


def test_transition_does_not_mutate_input(dungeon):
    start = GameState()
    after = transition(dungeon, start, "init")
    moved = transition(dungeon, after, "east")
    assert start.turn == 0
    assert after.id == 0
    assert after.turn == 1
    assert moved.id == 2
    assert moved.turn == 2
    assert 3 not in after.doors


def test_full_walkthrough(session):
    out = play(session, "init", "search")
    assert out.message == "You open the small wooden chest and find a rusty iron key. You now have a rusty iron key."
    assert "The small wooden chest lies open and empty here." in out.description

    out = session("search")
    assert out.message == "You search but find nothing else of interest."
    assert "searched" in out.statuses

    out = session("east")
    assert out.message == "You go east."
    assert out.room == 2
    assert [e.description for e in out.exits] == ["To the west is an open door"]
    assert out.imperatives == [("Drop a coin into the well", "use well")]

    out = session("use")
    assert out.message == (
        "When you drop a coin into the well, it reveals a silver coin. "
        "You now have a rusty iron key and a silver coin."
    )
    assert out.imperatives == []
    assert session("use").message == "There is nothing else to use here."

    assert session("south").message == "You cannot go that way."
    out = session("search")
    assert out.message == "You discover a secret door to the south!"
    assert [e.towards for e in out.exits] == ["south", "west"]

    out = session("south")
    assert out.room == 4
    out = session("search")
    assert out.message == "You find a silver ring. You now have a rusty iron key, a silver coin and a silver ring."

    out = session("west")
    assert out.message == "You unlock the battered wooden double door and go west."
    assert out.room == 6

    out = session("search")
    assert out.message.startswith("You search the dwarf's remains and find a war hammer.")

    out = play(session, "east", "north", "west", "north")
    assert out.message == "You leave the dungeon."
    assert out.end is True


def test_locked_double_door_without_key(session):
    out = play(session, "init", "east", "search", "south", "west")
    assert out.room == 4
    assert out.message == (
        "You attempt to go west but the battered wooden double door is locked. "
        "It has a keyhole but you have no keys."
    )


def test_search_is_idempotent(session):
    play(session, "init", "search")
    first = session("search")
    second = session("search")
    assert first.message == second.message
    assert session.state.inventory == ["a rusty iron key"]


def test_numbered_exits(session):
    session("init")
    out = session("2")
    assert out.room == 2
    assert session("9").message == "You cannot go that way."


def test_unknown_action_is_a_soft_error(session):
    session("init")
    out = session("dance")
    assert out.message == "Not understood."
    assert out.error == "syntax"
    assert out.turn == 2
    assert session("noop").error is None


def test_quit(session):
    session("init")
    out = session("quit")
    assert out.message == "You quit."
    assert out.end is True


def test_tokens_are_normalised(session):
    session(" INIT ")
    assert session("East").room == 2
    assert session.history == ["init", "east"]


def test_listed_imperative_command_is_accepted(session):
    out = play(session, "init", "east")
    imperative, command = out.imperatives[0]
    assert command == "use well"
    out = session(command)
    assert out.error is None
    assert out.message.startswith("When you drop a coin into the well, it reveals a silver coin.")
    assert out.imperatives == []
    assert session.history[-1] == "use well"
    assert is_action(command)


class TestGatedDoors:
    def test_steel_door_barred_when_facing(self):
        session = game(two_rooms(DoorType.STEEL, dir_x=1))
        session("init")
        out = session("east")
        assert out.room == 0
        assert out.message == "The steel door will not budge. It is barred from the other side."

    def test_steel_door_opens_from_behind(self):
        session = game(two_rooms(DoorType.STEEL, dir_x=-1))
        session("init")
        out = session("east")
        assert out.room == 2
        assert out.message == "You lift the bar and open the steel door. You go east."
        out = session("west")
        assert out.room == 0
        assert out.message == "You go west."

    def test_portcullis_bars_when_facing(self):
        session = game(two_rooms(DoorType.PORTCULLIS, dir_x=1))
        out = session("init")
        assert out.exits[0].description == "To the east is a portcullis"
        assert session("east").message == "The portcullis bars your way."

    def test_portcullis_lever(self):
        session = game(two_rooms(DoorType.PORTCULLIS, dir_x=-1))
        out = session("init")
        assert out.exits[0].description == "To the east is a portcullis with a lever on the wall next to it"
        out = session("east")
        assert out.message == "You pull the lever. The portcullis opens. You go east."
        assert out.exits[0].description == "To the west is an open portcullis"


def test_repeated_directions_are_numbered():
    data = {
        "title": "Two Ways Out",
        "story": "",
        "rects": [
            {"x": 0, "y": 1, "w": 3, "h": 3},
            {"x": 0, "y": 0, "w": 1, "h": 1},
            {"x": 2, "y": 0, "w": 1, "h": 1},
        ],
        "doors": [
            {"x": 0, "y": 0, "dir": {"x": 0, "y": -1}, "type": 3},
            {"x": 2, "y": 0, "dir": {"x": 0, "y": -1}, "type": 3},
        ],
        "notes": [],
    }
    session = game(compile_dungeon(data, rng=random.Random(1)))
    out = session("init")
    assert [e.description for e in out.exits] == [
        "To the north is a way out of the dungeon - 1",
        "To the north is a way out of the dungeon - 2",
    ]
    assert session("2").end is True


class TestCuriousFeatures:
    @pytest.fixture()
    def session(self):
        return game(two_rooms(DoorType.DOOR, notes=[
            ("A porcelain doll, turns into dust when it is picked up.", {"x": 1, "y": 1}),
            ("A strange glowing mirror, teleports you away when touched.", {"x": 5, "y": 1}),
        ]))

    def test_picked_up_feature_is_gone(self, session):
        out = session("init")
        assert "There is a porcelain doll here." in out.description
        out = session("use")
        assert out.message == "When you pick up the doll, it turns into dust. You now have a porcelain doll."
        assert "porcelain doll" not in out.description
        assert session("use").message == "There is nothing else to use here."

    def test_teleport_returns_to_start(self, session):
        out = play(session, "init", "east", "use")
        assert out.message == "When you touch the mirror, it teleports you away. You return, and enter."
        assert out.room == 0

    def test_use_names_the_object(self, session):
        session("init")
        out = session("use  Mirror")
        assert out.message == "There is no mirror to use here."
        assert out.error is None
        out = session("use doll")
        assert out.message == "When you pick up the doll, it turns into dust. You now have a porcelain doll."
        assert session("use doll").message == "There is no doll to use here."

    def test_nothing_to_use(self):
        session = game(two_rooms(DoorType.DOOR))
        session("init")
        assert session("use").message == "There is nothing to use here."


def test_agents_are_described_in_their_room(dungeon):
    session = game(dungeon, agents=[
        Agent(id=0, name="a wasp-man", cls="peon", room=2),
        Agent(id=1, name="a wasp-man", cls="peon", room=2),
        Agent(id=2, name="a giant, soul-eating wasp", cls="monster", room=2),
    ])
    out = session("init")
    assert out.agents == []
    out = session("east")
    assert out.description.endswith("Two wasp-men and a giant, soul-eating wasp are here.")
    assert len(out.agents) == 3


def test_two_room_secret_exit():
    data = {
        "title": "Hidden Exit",
        "story": "",
        "rects": [
            {"x": 0, "y": 0, "w": 3, "h": 3},
            {"x": 3, "y": 1, "w": 1, "h": 1},
            {"x": 4, "y": 0, "w": 3, "h": 3},
            {"x": 5, "y": -1, "w": 1, "h": 1},
        ],
        "doors": [
            {"x": 3, "y": 1, "dir": {"x": 1, "y": 0}, "type": 1},
            {"x": 5, "y": -1, "dir": {"x": 0, "y": -1}, "type": 6},
        ],
        "notes": [],
    }
    session = game(compile_dungeon(data, rng=random.Random(1)))
    out = session("init")
    assert out.room == 0
    assert [e.towards for e in out.exits] == ["east"]
    out = session("east")
    assert out.room == 2
    assert [e.towards for e in out.exits] == ["west"]
    out = session("search")
    assert out.message == "You discover a secret door to the north!"
    assert len(out.exits) == 2
    out = session("north")
    assert out.message == "You leave the dungeon."
    assert out.end is True


def vault(door, *items):
    """Room 0 with a double door east to room 2, and room 3 south of room 0 holding ``items``."""
    data = {
        "title": "Vault",
        "story": "",
        "rects": [
            {"x": 0, "y": 0, "w": 3, "h": 3},
            {"x": 3, "y": 1, "w": 1, "h": 1},
            {"x": 4, "y": 0, "w": 3, "h": 3},
            {"x": 0, "y": 4, "w": 3, "h": 3},
            {"x": 1, "y": 3, "w": 1, "h": 1},
        ],
        "doors": [
            {"x": 3, "y": 1, "dir": {"x": 1, "y": 0}, "type": 5},
            {"x": 1, "y": 3, "dir": {"x": 0, "y": 1}, "type": 1},
        ],
        "notes": [{"text": door, "pos": {"x": 1, "y": 1}}] + [
            {"text": text, "pos": {"x": 1 + i, "y": 5}} for i, text in enumerate(items)
        ],
    }
    return game(compile_dungeon(data, rng=random.Random(1)))


def test_key_gated_double_door():
    session = vault(
        "A battered wooden double door with a keyhole on the eastern wall.",
        "A small brass key in a dusty crate.",
    )
    session("init")
    out = session("east")
    assert out.room == 0
    assert out.message == (
        "You attempt to go east but the battered wooden double door is locked. "
        "It has a keyhole but you have no keys."
    )
    out = play(session, "south", "search")
    assert out.message == "You open the dusty crate and find a small brass key. You now have a small brass key."
    out = play(session, "north", "east")
    assert out.message == "You unlock the battered wooden double door and go east."
    assert out.room == 2
    assert session.state.door_statuses(1) == {"unlocked", "open"}
    assert session.state.inventory == ["a small brass key"]
    assert play(session, "west", "east").message == "You go east."


def test_one_way_door_stays_open():
    session = game(two_rooms(DoorType.STEEL, dir_x=-1))
    session("init")
    session("east")
    for direction in ("west", "east", "west"):
        out = session(direction)
        assert out.message == f"You go {direction}."
    assert session.state.door_statuses(1) == {"unlocked", "open"}


def test_door_with_two_keyholes_needs_two_keys():
    session = vault(
        "A heavy iron double door with two keyholes on the eastern wall.",
        "A small brass key in a dusty crate.",
        "A loose stone hides a bent iron key.",
    )
    out = play(session, "init", "south", "search", "north", "east")
    assert out.room == 0
    assert out.message == (
        "You attempt to go east but the heavy iron double door is locked. "
        "It has two keyholes but you have only a small brass key."
    )
    out = play(session, "south", "search")
    assert out.message == "You find a bent iron key. You now have a small brass key and a bent iron key."
    out = play(session, "north", "east")
    assert out.message == "You unlock the heavy iron double door and go east."
    assert out.room == 2
    assert session.state.door_statuses(1) == {"unlocked", "open"}


def test_item_merely_ending_in_key_does_not_unlock():
    session = vault(
        "A battered wooden double door with a keyhole on the eastern wall.",
        "A stuffed monkey in a dusty crate.",
    )
    play(session, "init", "south", "search")
    assert session.state.inventory == ["a stuffed monkey"]
    out = play(session, "north", "east")
    assert out.room == 0
    assert out.message == (
        "You attempt to go east but the battered wooden double door is locked. "
        "It has a keyhole but you have no keys."
    )
    assert session.state.door_statuses(1) == set()
