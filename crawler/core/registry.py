"""Runtime index over a compiled dungeon.

Acts as an in-memory lookup so the game loop does not scan the room tuple
on every action.
"""
from __future__ import annotations
from typing import Dict, Optional

from .dungeon import Door, Dungeon, Room


class DungeonRegistry:
    def __init__(self, dungeon: Dungeon):
        self.dungeon = dungeon
        self.room_index: Dict[int, Room] = {room.id: room for room in dungeon.rooms}
        self.door_index: Dict[int, Door] = {door.id: door for door in dungeon.doors}
        # Lowest room id is where the player starts
        self.start_room_id: Optional[int] = min(self.room_index) if self.room_index else None

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.room_index.get(room_id)

    def get_door(self, door_id: int) -> Optional[Door]:
        return self.door_index.get(door_id)
