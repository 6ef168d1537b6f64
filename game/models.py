from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from world.cell import Coin, Coordinate, Position


class Direction(Enum):
    """Compass step, expressed as (Δrow, Δcolumn) in grid cells."""

    NORTH = (1, 0)
    SOUTH = (-1, 0)
    EAST = (0, 1)
    WEST = (0, -1)

    @property
    def offset(self) -> Tuple[int, int]:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Direction":
        """Case-insensitive lookup, e.g. ``"north"`` → ``Direction.NORTH``."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(d.name.lower() for d in cls)
            raise ValueError(f"Invalid direction '{name}'. Valid values: {valid}") from None


@dataclass
class Player:
    """The observer moving across the grid."""

    position: Position
    cell: Coordinate
    coins: List[Coin] = field(default_factory=list)
    path: List[Position] = field(default_factory=list)

    @property
    def coin_count(self) -> int:
        return len(self.coins)


__all__ = ["Direction", "Player", "Position"]
