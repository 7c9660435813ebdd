"""Central configuration for the dungeon crawler.

All tunables live here (default seed, encounter difficulty, logging level,
dungeon directory, geometry strictness). Every value has a sensible default
and can be overridden through environment variables.
"""
from __future__ import annotations
import os


def _get_int_env(name: str, default: int, minval: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_float_env(name: str, default: float, minval: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = float(raw)
        if minval is not None and v < minval:
            return default
        return v
    except ValueError:
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    return val in {"1", "true", "yes", "on"}


# ---------------- Randomness ----------------
DEFAULT_SEED: int = 42
ENV_SEED = "CRAWLER_SEED"


def get_seed() -> int:
    """Seed used when no explicit random source is supplied. Var: CRAWLER_SEED."""
    return _get_int_env(ENV_SEED, DEFAULT_SEED)


# ---------------- Encounters ----------------
DEFAULT_DIFFICULTY: float = 1.0
ENV_DIFFICULTY = "CRAWLER_DIFFICULTY"


def get_difficulty() -> float:
    """Multiplier applied to adversary counts. Var: CRAWLER_DIFFICULTY (>= 0)."""
    return _get_float_env(ENV_DIFFICULTY, DEFAULT_DIFFICULTY, minval=0.0)


# ---------------- Compiler ----------------
# Rooms with at least this many water cells get the "flooded" flourish
WATER_FLOOD_CELLS: int = _get_int_env("CRAWLER_WATER_FLOOD_CELLS", 12, minval=1)


def get_strict_geometry() -> bool:
    """Raise on malformed geometry instead of logging it. Var: CRAWLER_STRICT_GEOMETRY."""
    return _get_bool_env("CRAWLER_STRICT_GEOMETRY", False)


# ---------------- Runtime ----------------

def get_log_level() -> str:
    """Logging level name for the console runner. Var: CRAWLER_LOG_LEVEL (default WARNING)."""
    return os.getenv("CRAWLER_LOG_LEVEL", "WARNING").strip().upper()


def get_dungeons_dir() -> str:
    """Directory scanned for dungeon documents. Var: CRAWLER_DUNGEONS_DIR."""
    return os.getenv("CRAWLER_DUNGEONS_DIR", "assets/dungeons").strip()


__all__ = [
    # Randomness
    "DEFAULT_SEED", "ENV_SEED", "get_seed",
    # Encounters
    "DEFAULT_DIFFICULTY", "ENV_DIFFICULTY", "get_difficulty",
    # Compiler
    "WATER_FLOOD_CELLS", "get_strict_geometry",
    # Runtime
    "get_log_level", "get_dungeons_dir",
]
