from __future__ import annotations

from .board import Board, Bounds
from .cache import Cache, CacheMemento, CorruptState, EmptyLedger
from .cell import Cell, Coin, Coordinate, Position
from .generation import (
    generate_coins,
    initial_coin_count,
    luck,
    should_spawn,
)
from .settings import WorldSettings

__all__ = [
    "Board",
    "Bounds",
    "Cache",
    "CacheMemento",
    "Cell",
    "Coin",
    "Coordinate",
    "CorruptState",
    "EmptyLedger",
    "Position",
    "WorldSettings",
    "generate_coins",
    "initial_coin_count",
    "luck",
    "should_spawn",
]
