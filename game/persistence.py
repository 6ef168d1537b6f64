from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from world.board import Board
from world.cache import Cache, CorruptState, coin_from_json, is_index
from world.cell import Coin, Coordinate, Position
from .models import Player
from . import settings

logger = logging.getLogger("geocoin.persistence")
logger.addHandler(logging.NullHandler())


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
POSITION_KEY = "playerPosition"
CELL_KEY = "playerCell"
COINS_KEY = "playerCoins"
PATH_KEY = "playerPath"
CACHES_KEY = "caches"

STATE_KEYS: Tuple[str, ...] = (POSITION_KEY, CELL_KEY, COINS_KEY, PATH_KEY, CACHES_KEY)


# -----------------------------------------------------------------------------
# Custom Exceptions
# -----------------------------------------------------------------------------
class GameSaveError(Exception):
    """Exception raised when saving the game state fails."""


class GameLoadError(Exception):
    """Exception raised when loading the game state fails."""


# -----------------------------------------------------------------------------
# Key-value stores
# -----------------------------------------------------------------------------
class MemoryStore:
    """In-process store. Nothing survives the process."""

    def __init__(self, data: Optional[Mapping[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def update(self, values: Mapping[str, str]) -> None:
        self._data.update(values)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class JsonFileStore:
    """
    Store backed by a single JSON object file mapping keys to strings.

    The file is read once, on first access. Every write replaces the whole
    file through a temporary file, so a reader never observes a half-written
    snapshot.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path: Path = Path(path) if path is not None else settings.SAVE_FILE
        self._data: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._data is not None:
            return self._data

        data: Dict[str, str] = {}
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                raise GameLoadError(f"Failed to read or parse save file: {e}") from e
            if not isinstance(raw, dict):
                raise GameLoadError(f"Save file {self.path} does not hold a JSON object")
            for key, value in raw.items():
                if isinstance(value, str):
                    data[str(key)] = value
                else:
                    logger.warning("Skipping non-string save entry %r", key)
        self._data = data
        return data

    def _write(self, data: Dict[str, str]) -> None:
        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.flush()
        except OSError as e:
            raise GameSaveError(f"Failed to write to temporary save file: {e}") from e

        try:
            shutil.move(str(temp_file), str(self.path))
        except OSError as e:
            # Attempt to remove leftover temp file, but do not mask original error
            try:
                temp_file.unlink(missing_ok=True)
            except OSError:
                pass
            raise GameSaveError(f"Failed to rename temporary save file to final: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self.update({key: value})

    def _set_aside(self) -> None:
        """Move an unreadable save file out of the way so it can be replaced."""
        backup = self.path.with_suffix(self.path.suffix + ".bak")
        try:
            shutil.move(str(self.path), str(backup))
        except OSError as e:
            raise GameSaveError(f"Failed to move unreadable save file aside: {e}") from e
        logger.warning("Unreadable save file moved to %s", backup)
        self._data = {}

    def update(self, values: Mapping[str, str]) -> None:
        """Write all of ``values`` in a single file replacement."""
        try:
            current = self._load()
        except GameLoadError:
            self._set_aside()
            current = {}
        pending = dict(current)
        pending.update(values)
        self._write(pending)
        self._data = pending

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise GameSaveError(f"Failed to remove save file: {e}") from e
        self._data = {}


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------
@dataclass
class GameState:
    player: Player
    caches: Dict[Coordinate, Cache] = field(default_factory=dict)

    @classmethod
    def fresh(cls, board: Board, position: Position) -> "GameState":
        """State of a brand new game with the player at ``position``."""
        cell = board.cell_for_position(position)
        return cls(player=Player(position=position, cell=cell.key, path=[position]))

    def total_coins(self) -> int:
        """Coins in every cache plus the ones the player carries."""
        return sum(len(cache) for cache in self.caches.values()) + len(self.player.coins)


# -----------------------------------------------------------------------------
# Serialization / Deserialization Helpers
# -----------------------------------------------------------------------------
def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def serialize_caches(caches: Mapping[Coordinate, Cache]) -> str:
    """Encode caches as a list of ``[i, j, ledger]`` entries, ordered by coordinate."""
    return _dumps([[i, j, caches[(i, j)].serialize()] for i, j in sorted(caches)])


def encode_state(state: GameState) -> Dict[str, str]:
    player = state.player
    return {
        POSITION_KEY: _dumps(player.position.to_json()),
        CELL_KEY: _dumps(list(player.cell)),
        COINS_KEY: _dumps([coin.to_json() for coin in player.coins]),
        PATH_KEY: _dumps([[p.lat, p.lng] for p in player.path]),
        CACHES_KEY: serialize_caches(state.caches),
    }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def deserialize_position(text: str) -> Position:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise CorruptState(f"Position is not valid JSON: {e}") from e
    if isinstance(data, dict):
        lat, lng = data.get("lat"), data.get("lng")
    elif isinstance(data, list) and len(data) == 2:
        lat, lng = data
    else:
        raise CorruptState(f"Invalid position record: {data!r}")
    if not _is_number(lat) or not _is_number(lng):
        raise CorruptState(f"Invalid position record: {data!r}")
    return Position(float(lat), float(lng))


def deserialize_coins(text: str) -> List[Coin]:
    """Decode the player's inventory, skipping malformed coin records."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise CorruptState(f"Inventory is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptState(f"Inventory is not a list: {data!r}")

    coins: List[Coin] = []
    for entry in data:
        try:
            coins.append(coin_from_json(entry))
        except CorruptState as e:
            logger.warning("Skipping invalid inventory entry: %s", e)
    return coins


def deserialize_path(text: str) -> List[Position]:
    """Decode the path history, skipping malformed entries."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise CorruptState(f"Path is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptState(f"Path is not a list: {data!r}")

    path: List[Position] = []
    for entry in data:
        if isinstance(entry, list) and len(entry) == 2 and all(_is_number(v) for v in entry):
            path.append(Position(float(entry[0]), float(entry[1])))
        else:
            logger.warning("Skipping invalid path entry: %r", entry)
    return path


def deserialize_caches(text: str, board: Board) -> Dict[Coordinate, Cache]:
    """
    Rebuild caches from their persisted ledgers.

    An entry whose ledger is corrupt becomes an empty cache, so the key stays
    claimed and the cell is never generated again. Entries without usable
    coordinates are skipped.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise CorruptState(f"Cache map is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptState(f"Cache map is not a list: {data!r}")

    caches: Dict[Coordinate, Cache] = {}
    for entry in data:
        if not (
            isinstance(entry, list)
            and len(entry) >= 3
            and is_index(entry[0])
            and is_index(entry[1])
        ):
            logger.warning("Skipping invalid cache entry: %r", entry)
            continue
        cell = board.cell_at(entry[0], entry[1])
        cache = Cache(cell)
        try:
            cache.restore(entry[2])
        except CorruptState as e:
            logger.warning("Cache %s has a corrupt ledger, treating it as empty: %s", cell, e)
        caches[cell.key] = cache
    return caches


# -----------------------------------------------------------------------------
# Loading and Saving State
# -----------------------------------------------------------------------------
def load_state(store, board: Board, *, default_position: Optional[Position] = None) -> GameState:
    """
    Read the whole snapshot from ``store``.

    Each field is decoded on its own: a corrupt field is logged and replaced
    by its fresh-game value while the rest of the snapshot still loads.

    Raises:
        GameLoadError: if the store itself cannot be read.
    """
    start = default_position or settings.START_POSITION
    state = GameState.fresh(board, start)
    player = state.player
    player.path = []

    raw_position = store.get(POSITION_KEY)
    if raw_position is not None:
        try:
            player.position = deserialize_position(raw_position)
        except CorruptState as e:
            logger.warning("Invalid saved position, using start position: %s", e)

    cell = board.cell_for_position(player.position)
    raw_cell = store.get(CELL_KEY)
    if raw_cell is not None and raw_cell != _dumps(list(cell.key)):
        logger.debug("Saved cell %s disagrees with position; using %s", raw_cell, cell)
    player.cell = cell.key

    raw_coins = store.get(COINS_KEY)
    if raw_coins is not None:
        try:
            player.coins = deserialize_coins(raw_coins)
        except CorruptState as e:
            logger.warning("Invalid saved inventory, starting empty: %s", e)

    raw_path = store.get(PATH_KEY)
    if raw_path is not None:
        try:
            player.path = deserialize_path(raw_path)
        except CorruptState as e:
            logger.warning("Invalid saved path, starting over: %s", e)
    if not player.path:
        player.path = [player.position]

    raw_caches = store.get(CACHES_KEY)
    if raw_caches is not None:
        try:
            state.caches = deserialize_caches(raw_caches, board)
        except CorruptState as e:
            logger.warning("Invalid saved cache map, regenerating caches: %s", e)

    return state


def save_state(state: GameState, store) -> None:
    """
    Persist the whole snapshot with a single store write.

    Raises:
        GameSaveError: if the store cannot be written.
    """
    store.update(encode_state(state))


def clear_state(store) -> None:
    """Wipe every persisted key."""
    store.clear()


__all__ = [
    "CACHES_KEY",
    "CELL_KEY",
    "COINS_KEY",
    "GameLoadError",
    "GameSaveError",
    "GameState",
    "JsonFileStore",
    "MemoryStore",
    "PATH_KEY",
    "POSITION_KEY",
    "STATE_KEYS",
    "clear_state",
    "encode_state",
    "load_state",
    "save_state",
]
