from __future__ import annotations

"""Deterministic cache generation: the luck function and the spawn rules built on it."""

import math
import random
from typing import List, Sequence, Union

from .cell import Coin

KeyPart = Union[int, str]

# Purpose tag separating the coin-count stream from the spawn stream.
INITIAL_VALUE_TAG = "initialValue"


def _stable_hash(*args: int) -> int:
    """
    Deterministic 64-bit hash used for RNG seeding.
    Combines integer inputs into a reproducible 64-bit result.
    """
    x = 0x345678ABCDEF1234
    for a in args:
        a &= 0xFFFFFFFFFFFFFFFF
        a ^= a >> 33
        a = (a * 0xFF51AFD7ED558CCD) & 0xFFFFFFFFFFFFFFFF
        a ^= a >> 33
        x ^= a
        x = (x * 0xC4CEB9FE1A85EC53) & 0xFFFFFFFFFFFFFFFF
    return x


def luck_key(key: Sequence[KeyPart]) -> str:
    """Canonical text form of a luck key, e.g. ``[3, -2, "initialValue"]`` → ``"3,-2,initialValue"``."""
    return ",".join(str(part) for part in key)


def luck(key: Sequence[KeyPart]) -> float:
    """
    Return a reproducible pseudo-random value in [0, 1) for ``key``.

    The value depends on nothing but the key: no global seed and no session
    state, so the same key yields the same value in every process.
    """
    text = luck_key(key)
    seed = _stable_hash(len(text), *text.encode("utf-8"))
    return random.Random(seed).random()


def should_spawn(i: int, j: int, spawn_probability: float) -> bool:
    """True if the cell (i, j) holds a cache."""
    return luck([i, j]) < spawn_probability


def initial_coin_count(i: int, j: int, max_initial_coins: int) -> int:
    return math.floor(luck([i, j, INITIAL_VALUE_TAG]) * max_initial_coins)


def generate_coins(i: int, j: int, count: int) -> List[Coin]:
    """Coins minted in (i, j) with serials ``0..count-1`` in ascending order."""
    return [Coin(i, j, serial) for serial in range(count)]


__all__ = [
    "INITIAL_VALUE_TAG",
    "generate_coins",
    "initial_coin_count",
    "luck",
    "luck_key",
    "should_spawn",
]
