"""Dungeon analysis.

Expensive, read-only facts about a compiled dungeon that encounter placement
(and anything else interested in the layout) can share: room buckets by size
and reachability, item categories and names lifted from the title and story.
"""
from __future__ import annotations
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .core.dungeon import OUTSIDE, ContainerNote, CuriousNote, DoorType, Dungeon, Exit, ItemNote, Room, SecretNote

__all__ = [
    "DungeonAnalysis",
    "analyze_dungeon",
    "is_key",
    "is_weapon",
    "is_armor",
    "is_magic",
    "is_treasure",
]

_BOSS_PATTERNS = [
    re.compile(
        r"[A-Za-z/s]+ of (?P<boss>the [A-Za-z-]+ "
        r"(?!Cross|Skull|Moon|Star|Eye|Arrow|Fish|Crown|Bat|Heart|Bird|Lily|Leaf|Palm|Claw|Seashell|Snail|Fist)[A-Za-z]+)$"
    ),
    re.compile(r"[A-Za-z/s]+ of (?P<boss>[A-Za-z-]+)$"),
]

_DEAD_BOSS_PATTERNS = [
    re.compile(r"(?P<boss>[\w\s]+) is long (?:dead|gone), but people are still (?:reluctant|afraid) to come close to the"),
    re.compile(r"(?:Since|After) the (?:demise|death|fall|defeat) of (?P<boss>[\w\s]+) the [\w\s]+ has changed hands many times."),
    re.compile(r"Long after (?P<boss>[\w\s]+)'s (?:demise|death|fall|defeat) the (?:[\w\s]+) remained"),
]

_MONSTER_PATTERNS = [re.compile(r"(?:Recently|Lately) (?P<beast>an? [A-Za-z\s-]+) has made its (?:home|lair) here")]

# Even giant versions of some animals will never be scary
_ANIMAL_PATTERNS = [
    re.compile(r"(?:(?:badly )?infested by|overrun with) (?P<animal>(?!rabbit|sparrow|turtle|pig|pigeon|goat|chicken|cat)\w+)s"),
]

_ENEMY_PATTERNS = [
    re.compile(r"(?:Recently|Lately) a pack of (?P<enemies>[\w\s-]+) have made its (?:home|lair) here"),
    re.compile(r"(?:Recently|Lately) a (?:gang|party|band) of (?P<enemies>\w+) rediscovered"),
    re.compile(r"(?:Recently|Lately|Now) [\w\s]+ (?:squatted|controlled) by a (?:gang|party|band) of (?P<enemies>\w+)"),
]

_ARTIFACT_PATTERNS = [re.compile(r"[\w\s]+that (?P<artifact>[\w\s,-]+) is (?:still )?hidden here")]

_WEAPONS = (
    "axe", "dagger", "flail", "glaive", "halberd", "hammer", "javelin", "katana", "mace", "rapier",
    "scimitar", "spear", "staff", "sword",
)
_ARMOR = (
    "breastplate", "cape", "chainmail", "cloak", "helm", "leather armor", "mantle", "robe", "scale mail",
    "scarf", "shield",
)
_MAGIC = (
    "amulet", "ball", "blade", "book", "bow", "cape", "carpet", "censer", "coin", "compass", "cube", "doll",
    "eldritch", "enchanted", "flask", "flute", "gem", "grimoire", "holy", "horn", "hourglass", "knife",
    "lamp", "lantern", "life stealing", "lightning", "looking glass", "magic", "needle", "orb", "potion",
    "quill", "relic", "rod", "scroll", "skull", "slaying", "smiting", "spellbook", "staff", "stone",
    "tablet", "tarot deck", "tome", "unholy", "vengeance", "venom", "vorpal", "wand",
)
_KEY = re.compile(r"\bkeys?\b")
_TREASURE = re.compile(
    r"\b(?:box|bracelet|brooch|chain|chess piece|comb|crown|dice|egg|figurine|gems|idol|mask|medallion|"
    r"mirror|necklace|pin|ring|some gold|statuette|tiara)\b"
)


def is_key(item: str) -> bool:
    """'a small brass key' or 'two keys', but not 'a monkey' or 'a flask of whiskey'."""
    return bool(_KEY.search(item.lower()))


def is_weapon(item: str) -> bool:
    return any(w in item for w in _WEAPONS)


def is_armor(item: str) -> bool:
    return any(a in item for a in _ARMOR)


def is_magic(item: str) -> bool:
    return any(m in item for m in _MAGIC)


def is_treasure(item: str) -> bool:
    return bool(_TREASURE.search(item))


def _first_group(patterns, text: str, group: str) -> Optional[str]:
    for pattern in patterns:
        m = pattern.search(text)
        if m:
            return m.group(group)
    return None


def _room_items(room: Room) -> List[str]:
    items: List[str] = []
    for note in room.notes:
        if isinstance(note, (ContainerNote, ItemNote, SecretNote)):
            items.extend(note.items)
    return items


def _connected(rooms: List[Room], start: Room, predicate: Callable[[Exit], bool]) -> List[Room]:
    """Breadth-first walk from ``start`` following exits that pass ``predicate``."""
    by_id = {r.id: r for r in rooms}
    seen = {start.id}
    queue = deque([start])
    out: List[Room] = []
    while queue:
        room = queue.popleft()
        out.append(room)
        for ex in room.exits:
            if not predicate(ex) or ex.to == OUTSIDE or ex.to in seen or ex.to not in by_id:
                continue
            seen.add(ex.to)
            queue.append(by_id[ex.to])
    return sorted(out, key=lambda r: r.id)


def _gated(ex: Exit) -> bool:
    return ex.is_facing and ex.type in (DoorType.STEEL, DoorType.PORTCULLIS, DoorType.DOUBLE)


@dataclass
class DungeonAnalysis:
    title: str
    story: str
    boss_name: Optional[str] = None
    dead_boss: Optional[str] = None
    monster_name: Optional[str] = None
    enemies: Optional[str] = None
    animal: Optional[str] = None
    artifact: Optional[str] = None
    items: List[str] = field(default_factory=list)
    effects: List[str] = field(default_factory=list)
    weapons: List[str] = field(default_factory=list)
    armor: List[str] = field(default_factory=list)
    magic: List[str] = field(default_factory=list)
    treasure: List[str] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    very_large_rooms: List[Room] = field(default_factory=list)
    large_rooms: List[Room] = field(default_factory=list)
    medium_rooms: List[Room] = field(default_factory=list)
    tiny_rooms: List[Room] = field(default_factory=list)
    empty_rooms: List[Room] = field(default_factory=list)
    locked_rooms: List[Room] = field(default_factory=list)
    unlocked_rooms: List[Room] = field(default_factory=list)
    secret_rooms: List[Room] = field(default_factory=list)
    non_secret_rooms: List[Room] = field(default_factory=list)
    treasure_rooms: List[Room] = field(default_factory=list)
    unlocked_nonsecret_rooms: List[Room] = field(default_factory=list)
    unlocked_nonsecret_treasure_rooms: List[Room] = field(default_factory=list)
    rooms_by_exits: List[Room] = field(default_factory=list)
    rooms_by_area: List[Room] = field(default_factory=list)
    gate_room: Optional[Room] = None
    just_inside_room: Optional[Room] = None
    ending_room: Optional[Room] = None
    num_keys: int = 0

    def ids(self) -> Dict[str, object]:
        """Same analysis with rooms reduced to their ids, handy for logging."""
        out: Dict[str, object] = {}
        for key, value in self.__dict__.items():
            if isinstance(value, list) and value and isinstance(value[0], Room):
                out[key] = [r.id for r in value]
            elif isinstance(value, Room):
                out[key] = value.id
            else:
                out[key] = value
        return out


def analyze_dungeon(dungeon: Dungeon) -> DungeonAnalysis:
    rooms = sorted(dungeon.rooms, key=lambda r: r.id)
    analysis = DungeonAnalysis(title=dungeon.title, story=dungeon.story, rooms=rooms)
    if not rooms:
        return analysis

    analysis.boss_name = _first_group(_BOSS_PATTERNS, dungeon.title, "boss")
    analysis.dead_boss = _first_group(_DEAD_BOSS_PATTERNS, dungeon.story, "boss")
    analysis.monster_name = _first_group(_MONSTER_PATTERNS, dungeon.story, "beast")
    analysis.enemies = _first_group(_ENEMY_PATTERNS, dungeon.story, "enemies")
    analysis.animal = _first_group(_ANIMAL_PATTERNS, dungeon.story, "animal")
    analysis.artifact = _first_group(_ARTIFACT_PATTERNS, dungeon.story, "artifact")

    items = sorted(item for room in rooms for item in _room_items(room))
    analysis.items = items
    analysis.effects = [n.action for room in rooms for n in room.notes if isinstance(n, CuriousNote)]
    analysis.weapons = [i for i in items if is_weapon(i)]
    analysis.armor = [i for i in items if is_armor(i)]
    analysis.magic = [i for i in items if is_magic(i)]
    analysis.treasure = [i for i in items if is_treasure(i)]
    analysis.num_keys = sum(1 for i in items if is_key(i))

    start = rooms[0]
    has_keyhole = any("keyhole" in n.text for room in rooms for n in room.notes)
    analysis.unlocked_rooms = _connected(rooms, start, lambda ex: not _gated(ex)) if has_keyhole else list(rooms)
    unlocked_ids = {r.id for r in analysis.unlocked_rooms}
    analysis.locked_rooms = [r for r in rooms if r.id not in unlocked_ids]
    analysis.non_secret_rooms = _connected(rooms, start, lambda ex: ex.type != DoorType.SECRET)
    non_secret_ids = {r.id for r in analysis.non_secret_rooms}
    analysis.secret_rooms = [r for r in rooms if r.id not in non_secret_ids]

    analysis.treasure_rooms = [
        r for r in rooms if any(is_treasure(i) or is_magic(i) for i in _room_items(r))
    ]
    analysis.ending_room = next((r for r in rooms if r.ending), None)
    analysis.gate_room = next(
        (r for r in rooms if any("keyhole" in n.text or re.search(r"gate|door", n.text) for n in r.notes)),
        None,
    )
    if analysis.gate_room is not None:
        inside = next((ex.to for ex in analysis.gate_room.exits if ex.type == DoorType.DOUBLE), None)
        analysis.just_inside_room = next((r for r in rooms if r.id == inside), None)

    analysis.very_large_rooms = [r for r in rooms if not r.ending and r.w * r.h >= 25]
    analysis.large_rooms = [r for r in rooms if 9 <= r.w * r.h < 25]
    analysis.medium_rooms = [r for r in rooms if 6 <= r.w * r.h < 9]
    analysis.tiny_rooms = [r for r in rooms if r.w * r.h < 6]
    analysis.empty_rooms = [r for r in rooms if not r.notes]
    analysis.rooms_by_exits = sorted(rooms, key=lambda r: -len(r.exits))
    analysis.rooms_by_area = sorted(rooms, key=lambda r: -(r.w * r.h))

    locked_ids = {r.id for r in analysis.locked_rooms}
    analysis.unlocked_nonsecret_rooms = [r for r in rooms if r.id in non_secret_ids and r.id not in locked_ids]
    analysis.unlocked_nonsecret_treasure_rooms = [
        r for r in analysis.treasure_rooms if r.id in non_secret_ids and r.id not in locked_ids
    ]
    return analysis
