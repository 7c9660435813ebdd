"""Console front end for the dungeon crawler.

Usage (example):
    python run.py                      # pick a dungeon from the menu
    python run.py --dungeon crypt      # play a dungeon whose file name contains 'crypt'
    python run.py --walk 200           # random walk, quitting at turn 200
Then type commands:
    north | w     search | x     use | u     1..9     quit | q
"""
from __future__ import annotations
import argparse
import difflib
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional, Set

from jsonschema import ValidationError

from config import get_log_level, get_seed
from crawler.core.actions import DIGIT_ACTIONS, GameError, GameOutput, GameSession
from crawler.core.dungeon import OUTSIDE, DoorType, DungeonGeometryError
from crawler.core.persistence import SaveError
from crawler.rng import RandomSource, choice, make_rng
from game.bootstrap import find_dungeon, list_dungeons, load_dungeon, load_dungeon_and_session
from game.saves import list_saves, load_game, save_game

PROMPT = "> "

# Single-key shortcuts
KEY_ACTIONS = {
    "w": "north",
    "a": "west",
    "s": "south",
    "d": "east",
    "x": "search",
    "u": "use",
    "q": "quit",
}

COMMAND_HELP = {
    'north': {'usage': 'north | w', 'desc': 'Go through the exit to the north (also east/d, south/s, west/a).'},
    '1': {'usage': '1..9', 'desc': 'Take the numbered exit, as listed.'},
    'search': {'usage': 'search | x', 'desc': 'Search the room for items and secret doors.'},
    'use': {'usage': 'use [object] | u', 'desc': 'Interact with the curious feature of the room.'},
    'look': {'usage': 'look', 'desc': 'Describe the current room again.'},
    'inventory': {'usage': 'inventory | inv', 'desc': 'List the items you carry.'},
    'save': {'usage': 'save [slot]', 'desc': 'Save the game. Default: quicksave.'},
    'load': {'usage': 'load [slot]', 'desc': 'Load a saved game. Default: quicksave.'},
    'saves': {'usage': 'saves', 'desc': 'List the available saves.'},
    'help': {'usage': 'help [command]', 'desc': 'Without arguments list everything; with one show its usage.'},
    'quit': {'usage': 'quit | q', 'desc': 'Leave the game.'},
}

_NOTHING_LEFT = re.compile(r"nothing( else)? of interest")


def help_lines():
    lines = ["Available commands:"]
    max_usage = max(len(info['usage']) for info in COMMAND_HELP.values())
    for name, info in COMMAND_HELP.items():
        lines.append(f" {info['usage'].ljust(max_usage)}  - {info['desc']}")
    return lines


def to_action(cmd: str) -> Optional[str]:
    """Map console input to a game action token, or None when it is not one."""
    cmd = cmd.strip().lower()
    if cmd in KEY_ACTIONS:
        return KEY_ACTIONS[cmd]
    if cmd in {"north", "east", "south", "west", "search", "use", "quit"} or cmd in DIGIT_ACTIONS:
        return cmd
    if cmd.startswith("use "):
        return " ".join(cmd.split())
    return None


def output_lines(out: GameOutput, with_message: bool = True) -> List[str]:
    lines = []
    if with_message and out.message:
        lines.append(out.message)
    if out.end:
        return lines
    lines.append(f"#{out.turn}: {out.description}")
    lines.extend(e.description for e in out.exits)
    for imperative, command in out.imperatives:
        lines.append(f"  ({imperative}: {command})")
    return lines


def _print(lines: List[str]) -> None:
    for line in lines:
        print(line)


def _print_help(cmd: str) -> None:
    parts = cmd.split(maxsplit=1)
    if len(parts) == 1:
        _print(help_lines())
        return
    topic = parts[1].strip()
    info = COMMAND_HELP.get(topic)
    if info:
        print(f"Usage: {info['usage']}\n{info['desc']}")
        return
    close = difflib.get_close_matches(topic, COMMAND_HELP.keys(), n=3)
    if close:
        print(f"Command '{topic}' not found. Did you mean: {', '.join(close)}")
    else:
        print(f"Command '{topic}' not found.")


def game_loop(path: Path, difficulty: Optional[float] = None, seed: Optional[int] = None):
    dungeon, session = load_dungeon_and_session(path, difficulty=difficulty, seed=seed)
    out = session("init")
    _print(output_lines(out))
    while not out.end:
        try:
            cmd = input(PROMPT).strip().lower()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            return
        if not cmd:
            continue
        if cmd.startswith("help"):
            _print_help(cmd)
            continue
        if cmd == "look":
            _print(output_lines(session.output(), with_message=False))
            continue
        if cmd in {"inventory", "inv", "i"}:
            items = session.state.inventory
            print(f"You carry: {', '.join(items)}." if items else "You carry nothing.")
            continue
        if cmd.startswith("save"):
            parts = cmd.split(maxsplit=1)
            slot = parts[1].strip() if len(parts) > 1 else "quicksave"
            try:
                print(f"Game saved to {save_game(session.state, path, slot_name=slot)}")
            except SaveError as e:
                print(f"[ERROR] {e}")
            continue
        if cmd.startswith("load"):
            parts = cmd.split(maxsplit=1)
            slot = parts[1].strip() if len(parts) > 1 else "quicksave"
            try:
                state, saved_path = load_game(slot_name=slot)
            except SaveError as e:
                print(f"[ERROR] {e}")
                continue
            if saved_path and Path(saved_path).resolve() != Path(path).resolve():
                print(f"[ERROR] Save '{slot}' belongs to {saved_path}")
                continue
            session = GameSession(dungeon, state=state)
            print(f"Loaded '{slot}'.")
            _print(output_lines(session.output(), with_message=False))
            continue
        if cmd == "saves":
            saves = list_saves()
            if not saves:
                print("No saves.")
            for s in saves:
                print(f" {s['slot_name']}  turn {s['turn']}  {s['date_saved']}  {s['dungeon']}")
            continue
        action = to_action(cmd)
        if action is None:
            close = difflib.get_close_matches(cmd, COMMAND_HELP.keys(), n=3)
            if close:
                print(f"Unknown command: '{cmd}'. Did you mean: {', '.join(close)}")
            else:
                print(f"Unknown command: '{cmd}'. Type 'help' for a list or 'help <command>' for details.")
            continue
        try:
            out = session(action)
        except GameError as e:
            print(f"[ERROR] {e}")
            return
        _print(output_lines(out))


# --- Random walk ---

def _walk_action(out: GameOutput, seen: Set[int], min_turns: int, rng: RandomSource) -> str:
    if min_turns > 0 and out.turn >= min_turns:
        return "quit"
    if out.room not in seen and not _NOTHING_LEFT.search(out.message):
        seen.add(out.room)
        return "search"
    stay = min_turns > 0 and out.turn < min_turns
    possible = []
    for i, e in enumerate(out.exits):
        if stay and e.to == OUTSIDE:
            continue
        possible.extend([e.towards, str(i + 1)])
    for i, e in enumerate(out.exits):
        token = str(i + 1)
        if token not in possible or "open" in e.statuses:
            continue
        if e.is_facing and e.type in (DoorType.STEEL, DoorType.PORTCULLIS):
            continue
        if e.is_facing and "keyhole" in e.description and out.action in (token, "search"):
            continue
        return token
    return choice(rng, possible) if possible else "quit"


def random_walk(path: Path, min_turns: int = 0, seed: Optional[int] = None) -> List[GameOutput]:
    """Play ``path`` with random moves; with ``min_turns`` > 0 stay inside until that turn, then quit."""
    rng = make_rng(seed)
    dungeon, session = load_dungeon_and_session(path, seed=seed)
    seen: Set[int] = set()
    action = "init"
    outputs = []
    while True:
        out = session(action)
        outputs.append(out)
        _print(output_lines(out))
        if out.end:
            return outputs
        action = _walk_action(out, seen, min_turns, rng)
        print(PROMPT + action)


def main_menu(difficulty: Optional[float] = None, seed: Optional[int] = None):
    dungeons = list_dungeons()
    if not dungeons:
        print("No dungeons found.")
        return
    title = " DUNGEON CRAWLER "
    deco = "=" * len(title)
    while True:
        print(deco)
        print(title)
        print(deco)
        for i, p in enumerate(dungeons):
            print(f"{i + 1}) {p.stem}")
        print("q) Quit")
        try:
            selected = input(PROMPT).strip().lower()
        except (EOFError, KeyboardInterrupt):
            selected = "q"
        if selected in {"q", "quit", "exit"}:
            print("Goodbye.")
            break
        if selected == "help":
            _print(help_lines())
        elif selected.isdigit() and 1 <= int(selected) <= len(dungeons):
            _play(dungeons[int(selected) - 1], difficulty, seed)
        else:
            print(f"Choose 1-{len(dungeons)}, or q to quit (help lists the game commands)")


def _play(path: Path, difficulty: Optional[float], seed: Optional[int]) -> None:
    try:
        game_loop(path, difficulty=difficulty, seed=seed)
    except (ValidationError, DungeonGeometryError) as e:
        print(f"[ERROR] {path.name} is not a playable dungeon: {e}")


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Play a dungeon crawl generated from a map file")
    parser.add_argument("--dungeon", help="Dungeon file, or part of a file name in the dungeons directory")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: CRAWLER_SEED or %d)" % get_seed())
    parser.add_argument("--difficulty", type=float, default=None, help="Adversary difficulty factor")
    parser.add_argument("--walk", type=int, metavar="TURNS", default=None,
                        help="Random walk; quit at TURNS (0 walks until leaving the dungeon)")
    parser.add_argument("--check", action="store_true", help="Only load and validate the dungeon")
    args = parser.parse_args(argv)

    logging.basicConfig(level=get_log_level(), format="%(levelname)s %(message)s")

    path = None
    if args.dungeon:
        path = find_dungeon(args.dungeon)
        if path is None:
            print(f"Dungeon '{args.dungeon}' not found.")
            return 1
    if args.check:
        targets = [path] if path else list_dungeons()
        for target in targets:
            try:
                dungeon = load_dungeon(target, seed=args.seed)
            except (ValidationError, DungeonGeometryError) as e:
                print(f"{target.name}: {e}")
                continue
            print(f"{target.name}: '{dungeon.title}', {len(dungeon.rooms)} rooms")
        return 0
    if args.walk is not None:
        if path is None:
            dungeons = list_dungeons()
            if not dungeons:
                print("No dungeons found.")
                return 1
            path = choice(make_rng(args.seed), dungeons)
            print(f"Selected: {path.name}")
        random_walk(path, min_turns=args.walk, seed=args.seed)
        return 0
    if path is not None:
        _play(path, args.difficulty, args.seed)
    else:
        main_menu(args.difficulty, args.seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
