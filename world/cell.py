from __future__ import annotations

"""
Value types for grid cells and the coins that live in them.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class Cell:
    """
    A single square of the grid, addressed by integer (i, j).

    Cells should be obtained through ``Board.canonicalize`` (or the board's
    lookup helpers) so that equal coordinates always resolve to the same
    object and identity comparisons are safe.
    """

    i: int
    j: int

    @property
    def key(self) -> Coordinate:
        """Structural map key for this cell."""
        return (self.i, self.j)

    def __str__(self) -> str:
        return f"{self.i},{self.j}"


@dataclass(frozen=True)
class Position:
    """Continuous (latitude, longitude) location of the player."""

    lat: float
    lng: float

    def to_json(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Coin:
    """
    A token generated in the cell (i, j) with a per-cell serial number.

    Coins are never created outside of cache generation; afterwards they only
    move between cache ledgers and the player's inventory.
    """

    i: int
    j: int
    serial: int

    @property
    def home(self) -> Coordinate:
        return (self.i, self.j)

    def __str__(self) -> str:
        return f"{self.i}:{self.j}#{self.serial}"

    def to_json(self) -> Dict[str, int]:
        return {"i": self.i, "j": self.j, "serial": self.serial}


__all__ = ["Cell", "Coin", "Coordinate", "Position"]
