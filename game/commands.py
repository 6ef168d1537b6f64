from __future__ import annotations

"""Commands accepted by ``Game.dispatch`` and the view model it returns."""

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from world.board import Bounds
from world.cell import Coin, Coordinate, Position
from .models import Direction
from .visibility import WindowUpdate


@dataclass(frozen=True)
class Move:
    """Step one cell in ``direction``."""

    direction: Direction


@dataclass(frozen=True)
class MoveTo:
    """Jump to an absolute position, e.g. a location feed update."""

    position: Position


@dataclass(frozen=True)
class Collect:
    cell: Coordinate


@dataclass(frozen=True)
class Deposit:
    """
    Put a coin from the inventory into the cache at ``cell``.

    Without ``coin`` the most recently collected coin is deposited.
    """

    cell: Coordinate
    coin: Optional[Coin] = None


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class PositionLost:
    """The location feed failed; surfaced to the user, changes nothing."""

    reason: str = "Position unavailable"


Command = Union[Move, MoveTo, Collect, Deposit, Reset, PositionLost]


@dataclass(frozen=True)
class CacheView:
    """Display snapshot of one visible cache."""

    cell: Coordinate
    coins: Tuple[Coin, ...]
    bounds: Bounds
    center: Position
    in_reach: bool

    @property
    def coin_count(self) -> int:
        return len(self.coins)


@dataclass(frozen=True)
class ViewModel:
    """Everything the UI needs after a command has been handled."""

    ok: bool
    message: str
    position: Position
    cell: Coordinate
    coins: Tuple[Coin, ...]
    path: Tuple[Position, ...]
    caches: Tuple[CacheView, ...] = ()
    window: WindowUpdate = field(default_factory=WindowUpdate)
    saved: bool = True

    @property
    def status(self) -> str:
        return f"Player coins: {len(self.coins)}"

    def cache_at(self, cell: Coordinate) -> Optional[CacheView]:
        for view in self.caches:
            if view.cell == cell:
                return view
        return None


__all__ = [
    "CacheView",
    "Collect",
    "Command",
    "Deposit",
    "Move",
    "MoveTo",
    "PositionLost",
    "Reset",
    "ViewModel",
]
