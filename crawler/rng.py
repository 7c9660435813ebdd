"""Random source plumbing.

Every bit of flavour randomness (water descriptions, archway vs entranceway,
encounter names and placement) is drawn from an object exposing
``random() -> float`` in [0, 1). ``random.Random`` satisfies it, so tests
just pass a seeded instance.
"""
from __future__ import annotations
import random as _random
from typing import List, Optional, Protocol, Sequence, TypeVar

from config import get_seed

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def make_rng(seed: Optional[int] = None) -> RandomSource:
    return _random.Random(get_seed() if seed is None else seed)


def choice(rng: RandomSource, items: Sequence[T]) -> T:
    return items[int(rng.random() * len(items))]


def shuffled(rng: RandomSource, items: Sequence[T]) -> List[T]:
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out
