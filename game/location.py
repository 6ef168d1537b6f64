from __future__ import annotations

"""Position feed collaborator and the tracker that turns its updates into moves."""

import json
import logging
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, Deque, Iterable, List, Optional, Protocol, Union

from world.cell import Position
from .commands import MoveTo, PositionLost, ViewModel

if TYPE_CHECKING:
    from .game import Game

logger = logging.getLogger("geocoin.location")
logger.addHandler(logging.NullHandler())


class PositionUnavailable(Exception):
    """Raised by a position feed when access is denied or the fix is lost."""


class PositionFeed(Protocol):
    """
    Source of device positions.

    ``poll`` returns the newest fix, or ``None`` when nothing new arrived,
    and raises ``PositionUnavailable`` when access is denied or lost.
    """

    def poll(self) -> Optional[Position]:
        ...


class ScriptedFeed:
    """
    Feed replaying a fixed sequence of updates.

    Each item is either a ``Position`` or an exception instance, which is
    raised when reached. ``poll`` returns ``None`` once the script is spent.
    """

    def __init__(self, updates: Iterable[Union[Position, Exception]] = ()) -> None:
        self._pending: Deque[Union[Position, Exception]] = deque(updates)

    def push(self, update: Union[Position, Exception]) -> None:
        self._pending.append(update)

    def __len__(self) -> int:
        return len(self._pending)

    def poll(self) -> Optional[Position]:
        if not self._pending:
            return None
        update = self._pending.popleft()
        if isinstance(update, Exception):
            raise update
        return update

    @classmethod
    def from_file(cls, path: Path) -> "ScriptedFeed":
        """
        Load a JSON list of ``[lat, lng]`` pairs.

        Raises:
            ValueError: if the file does not hold such a list.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Replay file {path} must hold a list of [lat, lng] pairs")
        positions: List[Position] = []
        for entry in data:
            if not (isinstance(entry, list) and len(entry) == 2):
                raise ValueError(f"Invalid replay entry: {entry!r}")
            positions.append(Position(float(entry[0]), float(entry[1])))
        return cls(positions)


class LocationTracker:
    """
    Forwards feed updates to the game while tracking is enabled.

    A failing feed switches tracking off and reports the failure to the game
    as a ``PositionLost`` command, which changes no state.
    """

    def __init__(self, game: Game, feed: PositionFeed) -> None:
        self.game = game
        self.feed = feed
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True
        logger.info("Location tracking enabled")

    def disable(self) -> None:
        self.enabled = False
        logger.info("Location tracking disabled")

    def toggle(self) -> bool:
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    def poll(self) -> Optional[ViewModel]:
        """Handle at most one pending update; ``None`` if nothing happened."""
        if not self.enabled:
            return None
        try:
            position = self.feed.poll()
        except PositionUnavailable as e:
            self.disable()
            reason = str(e) or "Position unavailable"
            return self.game.dispatch(PositionLost(f"Location tracking stopped: {reason}"))
        if position is None:
            return None
        return self.game.dispatch(MoveTo(position))


__all__ = ["LocationTracker", "PositionFeed", "PositionUnavailable", "ScriptedFeed"]
