"""Encounter placement.

Builds a deterministic list of presence-only agents (boss, monsters, elites,
peons) from a ``DungeonAnalysis`` and places at most one per room, keeping
the start room free. Names come from the dungeon's title and story where
possible and from word lists otherwise.
"""
from __future__ import annotations
import logging
import math
import re
from typing import Dict, List, Optional, Sequence

from config import get_difficulty
from .analysis import DungeonAnalysis
from .core.dungeon import Agent, Room
from .rng import RandomSource, choice, make_rng, shuffled
from .text import a_an, capitalize, join_words, tally

__all__ = ["AGENT_CLASSES", "adversary_counts", "create_agents", "describe_agents"]

AGENT_CLASSES = ("boss", "monster", "elite", "peon")

_RAIDERS = ["orc", "goblin", "hobgoblin", "kobold", "gnoll", "pirate", "bandit", "cultist", "thug", "ogre"]

_MONSTER_ADJS = [
    "venomous", "mutant", "man-eating", "albino", "blood-sucking", "spectral", "soul-eating",
    "intelligent", "fire-breathing", "invisible",
]
_MONSTERS = ["dragon", "basilisk", "manticore", "beholder", "sphinx", "chimera", "hydra", "wyvern", "wyrm"]
_ANIMAL_ADJS = ["huge", "giant", "terrifying", "fearsome", "undead"]

_BOSS_ADJS = [
    "serpent", "viper", "spider", "raven", "dread", "mad", "shadow", "dark", "blood", "cursed", "iron",
    "golden", "diamond", "jade", "storm", "fire", "ice", "void", "purple", "black", "red", "white",
    "vampire", "undead", "zombie", "silent", "moon", "immortal", "fallen", "obsidian", "scarlet", "great",
    "one-eyed", "lich", "amber", "leper", "grey", "blind", "demon", "blasphemous",
]
_BOSS_NOUNS = [
    "king", "queen", "prince", "emperor", "lord", "lady", "baron", "magus", "savant", "titan", "god",
    "dragon", "one", "master", "general", "beast", "knight", "witch", "reaper", "messiah", "priest", "oracle",
]

_ELITE_NOUNS = {
    "king": "guard",
    "queen": "guard",
    "prince": "guard",
    "emperor": "praetorian",
    "lord": "knight",
    "lady": "handmaiden",
    "baron": "man-at-arms",
    "magus": "apprentice",
    "savant": "disciple",
    "titan": "giant",
    "god": "zealot",
    "dragon": "dragonkin",
    "master": "enforcer",
    "general": "captain",
    "beast": "brute",
    "knight": "squire",
    "witch": "familiar",
    "reaper": "shade",
    "messiah": "fanatic",
    "priest": "acolyte",
    "oracle": "seer",
}


def adversary_counts(analysis: DungeonAnalysis, difficulty: float, rng: RandomSource) -> Dict[str, int]:
    """How many agents of each class the dungeon gets; ``difficulty`` scales all but the boss."""
    rooms = len(analysis.rooms)
    locked = 0 if len(analysis.locked_rooms) == rooms else len(analysis.locked_rooms)
    large = len(analysis.large_rooms) + len(analysis.medium_rooms)
    boss_chance = analysis.num_keys * 0.25 + len(analysis.empty_rooms) * 0.01
    boss = 1 if boss_chance > rng.random() else 0
    monster = math.floor((len(analysis.very_large_rooms) / 2.5 + large / 20 + (1 - boss_chance)) * difficulty)
    elite = math.floor((locked * 0.15 + (1 - boss_chance)) * difficulty)
    peon = math.floor((rooms - locked) * 0.15 * difficulty)
    return {"boss": boss, "monster": max(monster, 0), "elite": max(elite, 0), "peon": max(peon, 0)}


def _singular(noun: str) -> str:
    if noun.endswith("men"):
        return noun[:-3] + "man"
    if noun.endswith("ies"):
        return noun[:-3] + "y"
    if noun.endswith("s") and not noun.endswith("ss"):
        return noun[:-1]
    return noun


def _boss_name(analysis: DungeonAnalysis, rng: RandomSource) -> str:
    if analysis.dead_boss:
        magic_weapon = any(w in analysis.magic for w in analysis.weapons)
        return f"the {'ghost' if magic_weapon else 'ghastly revenant'} of {analysis.dead_boss}"
    return analysis.boss_name or f"the {choice(rng, _BOSS_ADJS)} {choice(rng, _BOSS_NOUNS)}"


def _monster_name(previous: Sequence[str], analysis: DungeonAnalysis, rng: RandomSource) -> str:
    if analysis.monster_name and analysis.monster_name not in previous:
        return analysis.monster_name
    if analysis.animal and not any(analysis.animal in p for p in previous):
        return a_an(f"{choice(rng, _ANIMAL_ADJS)} {analysis.animal}")
    name = a_an(f"{choice(rng, _MONSTER_ADJS)} {choice(rng, _MONSTERS)}")
    for _ in range(3):
        if name not in previous:
            break
        name = a_an(f"{choice(rng, _MONSTER_ADJS)} {choice(rng, _MONSTERS)}")
    return name


def _elite_name(analysis: DungeonAnalysis) -> str:
    words = re.findall(r"[\w-]+", analysis.boss_name or "")
    noun = words[-1].lower() if words else ""
    adjective = words[-2] if len(words) > 2 else ""
    return a_an(f"{adjective} {_ELITE_NOUNS.get(noun, 'champion')}".strip())


def _peon_name(previous: Sequence[str], analysis: DungeonAnalysis, raider: str, rng: RandomSource) -> str:
    if analysis.enemies:
        name = _singular(analysis.enemies.split()[-1])
    elif analysis.animal:
        if analysis.animal.startswith("were"):
            name = analysis.animal
        else:
            name = f"were{analysis.animal}" if rng.random() < 0.33 else f"{analysis.animal}-man"
    else:
        name = raider
    # No more than four of the same kind
    while sum(1 for p in previous if p.endswith(name)) >= 4:
        name = choice(rng, _RAIDERS)
    return a_an(name)


def _first_available(candidates: Sequence[Optional[Room]], available: Dict[int, Room]) -> Optional[Room]:
    for room in candidates:
        if room is not None and room.id in available:
            return room
    return None


def _pick_room(cls: str, analysis: DungeonAnalysis, available: Dict[int, Room], rng: RandomSource) -> Optional[Room]:
    locked_ids = {r.id for r in analysis.locked_rooms}
    if cls == "boss":
        room = _first_available([analysis.ending_room, *analysis.locked_rooms], available)
        if room is None and available:
            room = choice(rng, list(available.values()))
        return room
    if cls == "monster":
        large = (
            [r for r in analysis.very_large_rooms if r.id not in locked_ids]
            or [r for r in analysis.large_rooms if r.id not in locked_ids]
            or [r for r in analysis.medium_rooms if r.id not in locked_ids]
        )
        large = sorted(large, key=lambda r: -len(r.exits))
        return _first_available(
            [analysis.ending_room, *large, *shuffled(rng, analysis.unlocked_rooms)], available
        )
    if cls == "elite":
        treasure_ids = {r.id for r in analysis.treasure_rooms}
        ending_id = analysis.ending_room.id if analysis.ending_room else None
        return _first_available(
            [r for r in analysis.locked_rooms if r.id in treasure_ids]
            + [analysis.just_inside_room]
            + [r for r in analysis.locked_rooms if r.id != ending_id],
            available,
        )
    return _first_available(
        [
            *analysis.unlocked_nonsecret_treasure_rooms,
            *analysis.unlocked_nonsecret_rooms,
            *shuffled(rng, analysis.unlocked_rooms),
        ],
        available,
    )


def create_agents(
    analysis: DungeonAnalysis,
    difficulty: Optional[float] = None,
    rng: Optional[RandomSource] = None,
) -> List[Agent]:
    """Create and place agents. Deterministic for a given ``rng`` state."""
    if difficulty is None:
        difficulty = get_difficulty()
    if rng is None:
        rng = make_rng()
    if not analysis.rooms:
        return []
    counts = adversary_counts(analysis, difficulty, rng)
    raider = choice(rng, _RAIDERS)

    names: List[tuple] = []
    for cls in AGENT_CLASSES:
        for _ in range(counts[cls]):
            previous = [n for n, _c in names]
            if cls == "boss":
                name = _boss_name(analysis, rng)
            elif cls == "monster":
                name = _monster_name(previous, analysis, rng)
            elif cls == "elite":
                name = _elite_name(analysis)
            else:
                name = _peon_name(previous, analysis, raider, rng)
            names.append((name, cls))

    start_id = analysis.rooms[0].id
    available = {r.id: r for r in analysis.rooms if r.id != start_id}
    agents: List[Agent] = []
    for agent_id, (name, cls) in enumerate(names):
        room = _pick_room(cls, analysis, available, rng)
        if room is None:
            logging.info(f"No free room left for {cls} '{name}'")
            continue
        del available[room.id]
        agents.append(Agent(id=agent_id, name=name, cls=cls, room=room.id))
    logging.info(f"Placed {len(agents)} agents: {counts}")
    return agents


def describe_agents(agents: Sequence[Agent]) -> str:
    """'A gnoll is here.' / 'A giant wasp and two wasp-men are here.'"""
    if not agents:
        return ""
    verb = "is" if len(agents) == 1 else "are"
    return f"{capitalize(join_words(tally(a.name for a in agents)))} {verb} here."
