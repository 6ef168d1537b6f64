from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Set

from world.board import Board
from world.cache import Cache
from world.cell import Cell, Coordinate, Position
from world.generation import should_spawn

logger = logging.getLogger("geocoin.visibility")
logger.addHandler(logging.NullHandler())


@dataclass
class WindowUpdate:
    """What changed after the window moved."""

    spawned: List[Coordinate] = field(default_factory=list)
    shown: List[Coordinate] = field(default_factory=list)
    hidden: List[Coordinate] = field(default_factory=list)
    visible: FrozenSet[Coordinate] = frozenset()

    @property
    def changed(self) -> bool:
        return bool(self.spawned or self.shown or self.hidden)


class VisibilityWindow:
    """
    Keeps the set of visible caches in step with the player's position.

    ``caches`` is the game's cache map and is mutated in place when new
    caches spawn. A cell is considered at most once: it either gets a cache,
    which then stays in the map for good, or it is remembered as empty.
    """

    def __init__(self, board: Board, caches: Dict[Coordinate, Cache]) -> None:
        self.board = board
        self.caches = caches
        self._absent: Set[Coordinate] = set()
        self._visible: Set[Coordinate] = set()

    @property
    def visible(self) -> FrozenSet[Coordinate]:
        return frozenset(self._visible)

    def is_visible(self, key: Coordinate) -> bool:
        return key in self._visible

    def is_absent(self, key: Coordinate) -> bool:
        return key in self._absent

    def reset(self, caches: Dict[Coordinate, Cache]) -> None:
        """Forget every decision and start tracking ``caches`` instead."""
        self.caches = caches
        self._absent.clear()
        self._visible.clear()

    def consider(self, cell: Cell) -> Optional[Cache]:
        """
        Return the cache for ``cell``, deciding whether it exists on first use.

        A cell already in the cache map is returned as is, even if its ledger
        has been emptied; a cell decided empty stays empty.
        """
        key = cell.key
        cache = self.caches.get(key)
        if cache is not None:
            return cache
        if key in self._absent:
            return None

        settings = self.board.settings
        if not should_spawn(cell.i, cell.j, settings.spawn_probability):
            self._absent.add(key)
            return None

        cache = Cache.spawn(self.board.canonicalize(cell), settings.max_initial_coins)
        self.caches[key] = cache
        logger.info("Spawned cache at %s with %d coins", cell, len(cache))
        return cache

    def update(self, position: Position) -> WindowUpdate:
        """
        Recompute the window around ``position``.

        Spawns caches for cells entering the window for the first time and
        toggles visibility of every known cache. Ledgers are never touched.
        """
        nearby = self.board.cells_within_radius(position)
        result = WindowUpdate()

        for cell in sorted(nearby, key=lambda c: c.key):
            key = cell.key
            if key in self.caches or key in self._absent:
                continue
            if self.consider(cell) is not None:
                result.spawned.append(key)

        visible_now: Set[Coordinate] = set()
        for key, cache in self.caches.items():
            if cache.cell in nearby:
                visible_now.add(key)
                if key not in self._visible:
                    result.shown.append(key)
            elif key in self._visible:
                result.hidden.append(key)

        self._visible = visible_now
        result.shown.sort()
        result.hidden.sort()
        result.visible = frozenset(visible_now)
        logger.debug(
            "Window at %s: %d spawned, %d shown, %d hidden",
            position, len(result.spawned), len(result.shown), len(result.hidden),
        )
        return result


__all__ = ["VisibilityWindow", "WindowUpdate"]
