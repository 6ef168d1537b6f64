"""Game package exposing the controller and its collaborators."""

from .game import Game, ActionRejected, CacheOutOfReach, EmptyInventory
from .models import Direction, Player, Position
from .commands import (
    CacheView,
    Collect,
    Command,
    Deposit,
    Move,
    MoveTo,
    PositionLost,
    Reset,
    ViewModel,
)
from .location import LocationTracker, PositionFeed, PositionUnavailable, ScriptedFeed
from .persistence import (
    GameLoadError,
    GameSaveError,
    GameState,
    JsonFileStore,
    MemoryStore,
)
from .visibility import VisibilityWindow, WindowUpdate

__all__ = [
    "ActionRejected",
    "CacheOutOfReach",
    "CacheView",
    "Collect",
    "Command",
    "Deposit",
    "Direction",
    "EmptyInventory",
    "Game",
    "GameLoadError",
    "GameSaveError",
    "GameState",
    "JsonFileStore",
    "LocationTracker",
    "MemoryStore",
    "Move",
    "MoveTo",
    "Player",
    "Position",
    "PositionLost",
    "PositionFeed",
    "PositionUnavailable",
    "Reset",
    "ScriptedFeed",
    "ViewModel",
    "VisibilityWindow",
    "WindowUpdate",
]
