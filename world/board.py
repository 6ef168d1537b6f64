from __future__ import annotations

"""
board.py

Grid addressing for the cache world.

Maps continuous (lat, lng) positions onto integer grid cells, interns cells so
that equal coordinates always resolve to the same ``Cell`` object, and answers
neighbourhood queries for the visibility window.
"""

import math
from typing import Dict, Optional, Set, Tuple

from .cell import Cell, Coordinate, Position
from .settings import WorldSettings

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]


class Board:
    """
    Square grid of ``tile_size`` degrees per cell.

    The board owns the table of known cells. Cells are never evicted, so any
    cell handed out stays canonical for the lifetime of the board.
    """

    __slots__ = ("settings", "_known_cells")

    def __init__(self, settings: Optional[WorldSettings] = None) -> None:
        self.settings: WorldSettings = settings if settings is not None else WorldSettings()
        self._known_cells: Dict[Coordinate, Cell] = {}

    @property
    def tile_size(self) -> float:
        return self.settings.tile_size

    @property
    def visibility_radius(self) -> int:
        return self.settings.visibility_radius

    def __len__(self) -> int:
        return len(self._known_cells)

    def __contains__(self, coord: Coordinate) -> bool:
        """True if a cell for ``coord`` has been interned already."""
        return coord in self._known_cells

    # ─────────────────────────────────────────────────────────────────────
    # == CANONICAL CELLS ==

    def canonicalize(self, cell: Cell) -> Cell:
        """
        Return the interned cell with the same (i, j) as ``cell``.

        The first cell seen for a coordinate becomes the canonical one; later
        calls with an equal coordinate return that same object.
        """
        return self._known_cells.setdefault(cell.key, cell)

    def cell_at(self, i: int, j: int) -> Cell:
        """Canonical cell for the integer coordinate (i, j)."""
        known = self._known_cells.get((i, j))
        if known is not None:
            return known
        return self.canonicalize(Cell(i, j))

    def cell_for_position(self, position: Position) -> Cell:
        """Canonical cell containing ``position``."""
        i = math.floor(position.lat / self.tile_size)
        j = math.floor(position.lng / self.tile_size)
        return self.cell_at(i, j)

    # ─────────────────────────────────────────────────────────────────────
    # == GEOMETRY ==

    def bounds_of(self, cell: Cell) -> Bounds:
        """
        Return ``((min_lat, min_lng), (max_lat, max_lng))`` for ``cell``.

        The square is half-open: the max corner belongs to the next cell.
        """
        size = self.tile_size
        south_west = (cell.i * size, cell.j * size)
        north_east = ((cell.i + 1) * size, (cell.j + 1) * size)
        return south_west, north_east

    def center_of(self, cell: Cell) -> Position:
        (min_lat, min_lng), (max_lat, max_lng) = self.bounds_of(cell)
        return Position((min_lat + max_lat) / 2, (min_lng + max_lng) / 2)

    def cells_within_radius(self, position: Position, radius: Optional[int] = None) -> Set[Cell]:
        """
        Canonical cells whose offsets (di, dj) from the cell containing
        ``position`` satisfy ``|di| <= radius`` and ``|dj| <= radius``.

        The window is square (Chebyshev distance), not circular.
        """
        if radius is None:
            radius = self.visibility_radius
        origin = self.cell_for_position(position)
        return {
            self.cell_at(origin.i + di, origin.j + dj)
            for di in range(-radius, radius + 1)
            for dj in range(-radius, radius + 1)
        }

    @staticmethod
    def chebyshev_distance(a: Cell, b: Cell) -> int:
        return max(abs(a.i - b.i), abs(a.j - b.j))


__all__ = ["Board", "Bounds"]
