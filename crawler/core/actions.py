"""Core player actions and the turn pipeline.

``transition`` applies one action token to a GameState snapshot and returns
a new snapshot (the input is never mutated). ``game`` wraps it in a callable
session that returns ``GameOutput`` records for any presentation layer.

Pipeline per turn: reset transient fields -> dispatch the action -> mark the
current room visited -> advance the turn. Room prose and the exit list are
recomputed from the overlay whenever an output is built.
"""
from __future__ import annotations
import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..agents import describe_agents
from ..analysis import is_key
from ..text import a_an, decapitalize, describe_items, join_words, strip_article, tally, word_number
from .dungeon import (
    EXIT_DIRECTIONS,
    OUTSIDE,
    Agent,
    ContainerNote,
    CuriousNote,
    Door,
    DoorNote,
    DoorType,
    Dungeon,
    Exit,
    ItemNote,
    Note,
    Room,
    SecretNote,
)
from .loader.dungeon_loader import clockwise_key
from .registry import DungeonRegistry
from .state import GameState

__all__ = [
    "ACTIONS",
    "ALL_ACTIONS",
    "GameError",
    "ExitView",
    "GameOutput",
    "GameSession",
    "is_action",
    "is_key",
    "keys_required",
    "visible_exits",
    "transition",
    "to_output",
    "game",
]

DIGIT_ACTIONS = ("1", "2", "3", "4", "5", "6", "7", "8", "9")
ACTIONS = ("quit", "noop", "search", "use", "init") + DIGIT_ACTIONS
ALL_ACTIONS = ACTIONS + EXIT_DIRECTIONS

# Exit descriptions that read "an open ..." once the door has been passed
_OPENABLE = {"door", "double doors", "steel door", "portcullis"}
_PLURAL_EXIT = re.compile(r"(doors|stairs)")
_KEYHOLE_CLAUSE = re.compile(r"\s+with\s+\w+\s+keyholes?.*$")


class GameError(Exception):
    """Fatal misuse of the game loop: acting before ``init`` or a room the dungeon lacks."""


@dataclass
class ExitView:
    towards: Optional[str]
    to: Union[int, str]
    is_facing: bool
    type: Optional[int]
    description: str
    door: Optional[Door] = None
    statuses: List[str] = field(default_factory=list)


@dataclass
class GameOutput:
    action: Optional[str]
    message: str
    room: int
    description: str
    exits: List[ExitView]
    end: bool
    error: Optional[str]
    turn: int
    statuses: List[str]
    imperatives: List[Tuple[str, str]] = field(default_factory=list)
    agents: List[Agent] = field(default_factory=list)


def is_action(token: str) -> bool:
    """True for the fixed alphabet plus the ``use <object>`` form listed in ``imperatives``."""
    return token in ALL_ACTIONS or (token.startswith("use ") and bool(token[4:].strip()))


def keys_required(keyholes: str) -> int:
    """'a keyhole' -> 1, 'four keyholes' -> 4."""
    return max(word_number(keyholes.split()[0]), 1)


def _door_name(note: DoorNote) -> str:
    return _KEYHOLE_CLAUSE.sub("", strip_article(decapitalize(note.door)))


def _current_room(registry: DungeonRegistry, state: GameState) -> Room:
    room = registry.get_room(state.id)
    if room is None:
        raise GameError(f"Bad data: room {state.id} not found")
    return room


def is_visible(exit: Exit, state: GameState) -> bool:
    if exit.type == DoorType.SECRET and exit.is_facing:
        return "discovered" in state.door_statuses(exit.door.id)
    return True


def visible_exits(room: Room, state: GameState) -> List[Exit]:
    return sorted((e for e in room.exits if is_visible(e, state)), key=clockwise_key(room))


# ---------------- Movement ----------------

def _move(state: GameState, exit: Exit, message: str) -> None:
    state.id = exit.to
    state.message = message


def _go(state: GameState, registry: DungeonRegistry) -> None:
    room = _current_room(registry, state)
    exits = visible_exits(room, state)
    action = state.action
    if action in EXIT_DIRECTIONS:
        exit = next((e for e in exits if e.towards == action), None)
    else:
        index = int(action) - 1
        exit = exits[index] if 0 <= index < len(exits) else None
    if exit is None:
        state.message = "You cannot go that way."
        return
    if exit.to == OUTSIDE:
        state.message = "You leave the dungeon."
        state.end = True
        return
    towards = exit.towards or "on"
    if exit.door is None:
        _move(state, exit, f"You go {towards}.")
        return

    door = exit.door
    unlocked = "unlocked" in state.door_statuses(door.id)
    if door.type == DoorType.PORTCULLIS and not unlocked:
        if exit.is_facing:
            state.message = "The portcullis bars your way."
            return
        state.door(door.id).add("unlocked", "open")
        _move(state, exit, f"You pull the lever. The portcullis opens. You go {towards}.")
        return
    if door.type == DoorType.STEEL and not unlocked:
        if exit.is_facing:
            state.message = "The steel door will not budge. It is barred from the other side."
            return
        state.door(door.id).add("unlocked", "open")
        _move(state, exit, f"You lift the bar and open the steel door. You go {towards}.")
        return
    if exit.note is not None and exit.note.keyholes and not unlocked:
        name = _door_name(exit.note)
        keys = [item for item in state.inventory if is_key(item)]
        if len(keys) < keys_required(exit.note.keyholes):
            have = f"only {join_words(tally(keys))}" if keys else "no keys"
            state.message = (
                f"You attempt to go {towards} but the {name} is locked. "
                f"It has {exit.note.keyholes} but you have {have}."
            )
            return
        state.door(door.id).add("unlocked", "open")
        _move(state, exit, f"You unlock the {name} and go {towards}.")
        return
    state.door(door.id).add("open")
    _move(state, exit, f"You go {towards}.")


# ---------------- Search / use ----------------

def _unsearched(notes: Iterable[Note], kind: type, statuses) -> Optional[Note]:
    for note in notes:
        if isinstance(note, kind) and note.items and "searched" not in statuses(note.id):
            return note
    return None


def _search(state: GameState, registry: DungeonRegistry) -> None:
    room = _current_room(registry, state)
    room_state = state.room(room.id)
    for kind in (ContainerNote, ItemNote, SecretNote):
        note = _unsearched(room.notes, kind, room_state.note_statuses)
        if note is not None:
            room_state.add_note_status(note.id, "searched")
            state.inventory.extend(note.items)
            state.message = f"{note.message} You now have {describe_items(state.inventory)}."
            return

    secrets = [e for e in room.exits if e.type == DoorType.SECRET and e.is_facing]
    hidden = next((e for e in secrets if "discovered" not in state.door_statuses(e.door.id)), None)
    if hidden is not None:
        state.door(hidden.door.id).add("discovered")
        state.message = f"You discover a secret door to the {hidden.towards}!"
        return

    had_something = bool(secrets) or any(
        isinstance(n, (ContainerNote, ItemNote, SecretNote)) and n.items for n in room.notes
    )
    room_state.add("searched")
    state.message = f"You search but find nothing {'else ' if had_something else ''}of interest."


def _use(state: GameState, registry: DungeonRegistry, obj: Optional[str] = None) -> None:
    """Trigger the first unused curious feature, or the one whose object is ``obj``."""
    room = _current_room(registry, state)
    room_state = state.room(room.id)
    curious = [n for n in room.notes if isinstance(n, CuriousNote)]
    unused = [n for n in curious if "used" not in room_state.note_statuses(n.id)]
    if obj:
        unused = [n for n in unused if n.object == obj]
    note = unused[0] if unused else None
    if note is None and obj:
        state.message = f"There is no {obj} to use here."
        return
    if note is None:
        state.message = f"There is nothing {'else ' if curious else ''}to use here."
        return
    room_state.add_note_status(note.id, "used")
    message = note.message
    if note.items:
        state.inventory.extend(note.items)
        message += f" You now have {describe_items(state.inventory)}."
    if note.vanishes:
        room_state.add_note_status(note.id, "gone")
    if note.teleports:
        state.id = registry.start_room_id
        message += " You return, and enter."
    state.message = message


def _dispatch(state: GameState, registry: DungeonRegistry) -> None:
    action = state.action
    if action in EXIT_DIRECTIONS or action in DIGIT_ACTIONS:
        _go(state, registry)
    elif action == "search":
        _search(state, registry)
    elif action == "use" or action.startswith("use "):
        _use(state, registry, action[len("use"):].strip() or None)
    elif action == "quit":
        state.message = "You quit."
        state.end = True
    elif action == "noop":
        pass
    else:
        logging.debug(f"Unrecognised action {action!r} on turn {state.turn}")
        state.message = "Not understood."
        state.error = "syntax"


# ---------------- Transition ----------------

def _step(registry: DungeonRegistry, state: GameState, action: str) -> GameState:
    new = copy.deepcopy(state)
    if new.turn == 0:
        if action != "init":
            raise GameError("The first call to the game must be 'init'")
        if registry.start_room_id is None:
            raise GameError("Bad data: dungeon has no rooms")
        new.id = registry.start_room_id
        new.action = "init"
        new.message = f"{registry.dungeon.title}\n{registry.dungeon.story}"
        new.error = None
    else:
        _current_room(registry, new)
        new.action = action
        new.message = ""
        new.error = None
        _dispatch(new, registry)
    _current_room(registry, new)
    new.room(new.id).add("visited")
    new.turn += 1
    return new


def transition(dungeon: Dungeon, state: GameState, action: str) -> GameState:
    """Apply one action to ``state`` and return the next snapshot.

    Raises ``GameError`` for an action other than ``init`` on turn 0, for a
    dungeon without rooms, and when the state points at a room id the
    dungeon does not contain. Every other problem is a soft error carried in
    the returned state's ``message``/``error``.
    """
    return _step(DungeonRegistry(dungeon), state, action)


# ---------------- Output ----------------

def _note_description(note: Note, statuses) -> str:
    if isinstance(note, SecretNote):
        return ""
    if isinstance(note, (ContainerNote, ItemNote)):
        return note.empty if "searched" in statuses else note.pristine
    if isinstance(note, CuriousNote):
        return "" if "gone" in statuses else note.pristine
    return note.text


def describe_current_room(room: Room, state: GameState) -> str:
    parts = [f"You are in a {room.area} {room.description}"]
    for note in room.notes:
        text = _note_description(note, state.note_statuses(room.id, note.id))
        if text:
            parts.append(text)
    present = [a for a in state.agents if a.room == room.id]
    if present:
        parts.append(describe_agents(present))
    return " ".join(parts)


def _exit_views(room: Room, state: GameState) -> List[ExitView]:
    exits = visible_exits(room, state)
    directions = [e.towards for e in exits]
    numbered = len(set(directions)) < len(directions)
    views: List[ExitView] = []
    for i, e in enumerate(exits):
        statuses = sorted(state.door_statuses(e.door.id)) if e.door else []
        desc = e.description
        if "open" in statuses and desc in _OPENABLE:
            desc = f"open {desc}"
        phrase = f"are {desc}" if _PLURAL_EXIT.search(desc) else f"is {a_an(desc)}"
        suffix = f" - {i + 1}" if numbered else ""
        views.append(ExitView(
            towards=e.towards,
            to=e.to,
            is_facing=e.is_facing,
            type=e.type,
            description=f"To the {e.towards} {phrase}{suffix}",
            door=e.door,
            statuses=statuses,
        ))
    return views


def _imperatives(room: Room, state: GameState) -> List[Tuple[str, str]]:
    out: List[Tuple[str, str]] = []
    for note in room.notes:
        if isinstance(note, CuriousNote) and not state.note_statuses(room.id, note.id) & {"used", "gone"}:
            out.append((note.imperative, f"use {note.object}"))
    return out


def to_output(state: GameState, registry: DungeonRegistry) -> GameOutput:
    room = _current_room(registry, state)
    return GameOutput(
        action=state.action,
        message=state.message,
        room=state.id,
        description=describe_current_room(room, state),
        exits=_exit_views(room, state),
        end=state.end,
        error=state.error,
        turn=state.turn,
        statuses=sorted(state.room_statuses(room.id)),
        imperatives=_imperatives(room, state),
        agents=[a for a in state.agents if a.room == room.id],
    )


class GameSession:
    """Callable game interface bound to one compiled dungeon.

    ``session("north")`` normalises the token, advances the overlay and
    returns the resulting ``GameOutput``. Tokens are recorded in ``history``
    so a session can be replayed.
    """

    def __init__(self, dungeon: Dungeon, agents: Optional[Sequence[Agent]] = None,
                 state: Optional[GameState] = None):
        self.registry = DungeonRegistry(dungeon)
        self.state = state if state is not None else GameState(agents=list(agents or []))
        self.history: List[str] = []

    @property
    def dungeon(self) -> Dungeon:
        return self.registry.dungeon

    def __call__(self, action: str) -> GameOutput:
        token = " ".join(action.split()).lower()
        self.state = _step(self.registry, self.state, token)
        self.history.append(token)
        return to_output(self.state, self.registry)

    def output(self) -> GameOutput:
        """Output for the current state without taking an action."""
        if self.state.turn == 0:
            raise GameError("The first call to the game must be 'init'")
        return to_output(self.state, self.registry)


def game(dungeon: Dungeon, agents: Optional[Sequence[Agent]] = None) -> GameSession:
    return GameSession(dungeon, agents=agents)
