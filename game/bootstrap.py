"""Bootstrap utilities: load a dungeon JSON file and create a ready GameSession."""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from crawler.agents import create_agents
from crawler.analysis import analyze_dungeon
from crawler.core.actions import GameSession
from crawler.core.dungeon import Dungeon, compile_dungeon, validate_dungeon
from crawler.core.loader.validator import document_issues, validate_document
from crawler.rng import make_rng
from config import get_difficulty, get_dungeons_dir, get_strict_geometry

ROOT_DIR = Path(__file__).resolve().parent.parent


def dungeons_dir() -> Path:
    path = Path(get_dungeons_dir())
    return path if path.is_absolute() else ROOT_DIR / path


def list_dungeons(directory: Optional[Path] = None) -> List[Path]:
    directory = directory or dungeons_dir()
    return sorted(p for p in directory.glob("*.json") if p.is_file())


def find_dungeon(name: str, directory: Optional[Path] = None) -> Optional[Path]:
    """A path as given, else the first dungeon in the directory whose file name contains ``name``."""
    path = Path(name)
    if path.is_file():
        return path
    return next((p for p in list_dungeons(directory) if name in p.name), None)


def load_document(path: Path) -> dict:
    """Read and schema-check a document. Raises ``jsonschema.ValidationError`` when malformed."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    validate_document(data)
    for issue in document_issues(data):
        logging.warning(f"[{Path(path).name}] {issue}")
    return data


def load_dungeon(path: Path, seed: Optional[int] = None) -> Dungeon:
    data = load_document(path)
    rng = make_rng(seed) if seed is not None else None
    dungeon = compile_dungeon(data, rng=rng, strict=get_strict_geometry())
    for issue in validate_dungeon(dungeon):
        logging.warning(f"[{Path(path).name}] {issue}")
    return dungeon


def load_dungeon_and_session(
    path: Path,
    difficulty: Optional[float] = None,
    seed: Optional[int] = None,
) -> Tuple[Dungeon, GameSession]:
    dungeon = load_dungeon(path, seed=seed)
    analysis = analyze_dungeon(dungeon)
    logging.debug(f"Analysis of '{dungeon.title}': {analysis.ids()}")
    agents = create_agents(
        analysis,
        difficulty=get_difficulty() if difficulty is None else difficulty,
        rng=make_rng(seed if seed is not None else dungeon.seed),
    )
    return dungeon, GameSession(dungeon, agents=agents)
