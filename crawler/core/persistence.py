"""Game state serialization and replay.

Converts a GameState overlay to a JSON-compatible dict (sets become sorted
lists) and back, with a format version. Because the loop is deterministic,
a session can also be rebuilt by replaying its action tokens. No I/O here.
"""
from __future__ import annotations
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .actions import GameOutput, GameSession
from .dungeon import Agent, Dungeon
from .state import DoorState, GameState, RoomState

# Save format version - increment when making breaking changes
SAVE_VERSION = 1


class SaveError(Exception):
    """Exception raised for save/load operations."""
    pass


def serialize_game_state(state: GameState) -> Dict[str, Any]:
    """Convert GameState to serializable dictionary."""
    return {
        "_save_metadata": {
            "version": SAVE_VERSION,
            "timestamp": time.time(),
            "date_saved": datetime.now().isoformat(),
        },
        "id": state.id,
        "turn": state.turn,
        "action": state.action,
        "message": state.message,
        "error": state.error,
        "end": state.end,
        "doors": [{"id": d.id, "statuses": sorted(d.statuses)} for d in state.doors.values()],
        "rooms": [
            {
                "id": r.id,
                "statuses": sorted(r.statuses),
                "notes": {str(note_id): sorted(s) for note_id, s in r.notes.items()},
            }
            for r in state.rooms.values()
        ],
        "inventory": list(state.inventory),
        "agents": [{"id": a.id, "name": a.name, "cls": a.cls, "room": a.room} for a in state.agents],
    }


def _door_state(d: Dict[str, Any]) -> DoorState:
    door = DoorState(id=d["id"])
    door.add(*d["statuses"])
    return door


def _room_state(r: Dict[str, Any]) -> RoomState:
    room = RoomState(id=r["id"])
    room.add(*r["statuses"])
    for note_id, statuses in r.get("notes", {}).items():
        room.add_note_status(int(note_id), *statuses)
    return room


def deserialize_game_state(data: Dict[str, Any]) -> GameState:
    """Convert dictionary back to GameState."""
    metadata = data.get("_save_metadata", {})
    save_version = metadata.get("version", 0)
    if save_version > SAVE_VERSION:
        raise SaveError(f"Save file version {save_version} is newer than supported version {SAVE_VERSION}")
    try:
        doors = {d["id"]: _door_state(d) for d in data.get("doors", [])}
        rooms = {r["id"]: _room_state(r) for r in data.get("rooms", [])}
        return GameState(
            id=data["id"],
            turn=data["turn"],
            action=data.get("action"),
            message=data.get("message", ""),
            error=data.get("error"),
            end=data.get("end", False),
            doors=doors,
            rooms=rooms,
            inventory=list(data.get("inventory", [])),
            agents=[Agent(**a) for a in data.get("agents", [])],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SaveError(f"Malformed save data: {e}") from e


def replay(
    dungeon: Dungeon,
    actions: Iterable[str],
    agents: Optional[Sequence[Agent]] = None,
) -> List[GameOutput]:
    """Run ``actions`` (starting with 'init') on a fresh session and collect every output."""
    session = GameSession(dungeon, agents=agents)
    return [session(action) for action in actions]
