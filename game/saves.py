"""Save slots on disk.

A save stores the serialized GameState plus the dungeon file it belongs to,
so loading can recompile the same graph before resuming.
"""
from __future__ import annotations
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from crawler.core.persistence import SaveError, deserialize_game_state, serialize_game_state
from crawler.core.state import GameState

SAVES_DIR = Path("data/saves")


def ensure_saves_dir():
    """Ensure the saves directory exists."""
    SAVES_DIR.mkdir(parents=True, exist_ok=True)


def save_game(state: GameState, dungeon_path: Path, slot_name: str = "quicksave") -> str:
    """Save game state to a named slot and return the file path."""
    ensure_saves_dir()
    data = serialize_game_state(state)
    data["_save_metadata"]["dungeon"] = str(dungeon_path)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = SAVES_DIR / f"{slot_name}_{timestamp}.json"
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise SaveError(f"Failed to save game: {e}") from e
    return str(filepath)


def load_game(slot_name: Optional[str] = None, filepath: Optional[str] = None) -> Tuple[GameState, str]:
    """Load the newest save of a slot (or a specific file). Returns the state and its dungeon path."""
    if filepath:
        load_path = Path(filepath)
    elif slot_name:
        ensure_saves_dir()
        saves = sorted(SAVES_DIR.glob(f"{slot_name}_*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
        if not saves:
            raise SaveError(f"No saves found for slot '{slot_name}'")
        load_path = saves[0]
    else:
        raise SaveError("Must specify either slot_name or filepath")
    if not load_path.exists():
        raise SaveError(f"Save file not found: {load_path}")
    try:
        with open(load_path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SaveError(f"Failed to load game: {e}") from e
    return deserialize_game_state(data), data.get("_save_metadata", {}).get("dungeon", "")


def list_saves() -> List[Dict[str, Any]]:
    """List all available save files with metadata, newest first."""
    ensure_saves_dir()
    saves = []
    for save_file in SAVES_DIR.glob("*.json"):
        try:
            with open(save_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            # Skip corrupted save files
            continue
        metadata = data.get("_save_metadata", {})
        saves.append({
            "filename": save_file.name,
            "slot_name": save_file.stem.rsplit("_", 2)[0],
            "timestamp": metadata.get("timestamp", save_file.stat().st_mtime),
            "date_saved": metadata.get("date_saved", "Unknown"),
            "dungeon": metadata.get("dungeon", ""),
            "turn": data.get("turn", 0),
        })
    saves.sort(key=lambda x: x["timestamp"], reverse=True)
    return saves
