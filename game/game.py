import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from world.board import Board
from world.cache import Cache, EmptyLedger
from world.cell import Coordinate, Position
from world.settings import WorldSettings
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
from .models import Direction
from .persistence import (
    GameLoadError,
    GameSaveError,
    GameState,
    MemoryStore,
    clear_state,
    load_state,
    save_state,
)
from .visibility import VisibilityWindow, WindowUpdate
from . import settings

logger = logging.getLogger("geocoin.Game")
logger.addHandler(logging.NullHandler())


class ActionRejected(Exception):
    """A command that was refused without changing any state."""


class EmptyInventory(ActionRejected):
    """Raised when depositing while the player carries no coins."""


class CacheOutOfReach(ActionRejected):
    """Raised when interacting with a cache that is not visible or too far away."""


class Game:
    """
    Controller owning the whole game state.

    Every change goes through ``dispatch``: a command is applied, the
    snapshot is written to the store, and a ``ViewModel`` describing the
    result is returned. Commands are handled one at a time and errors caused
    by user input never escape ``dispatch``.
    """

    def __init__(
        self,
        store: Any = None,
        *,
        world_settings: Optional[WorldSettings] = None,
        start_position: Optional[Position] = None,
    ) -> None:
        self.store = store if store is not None else MemoryStore()
        self.board = Board(world_settings)
        self.start_position: Position = start_position or settings.START_POSITION
        self.state: GameState = GameState.fresh(self.board, self.start_position)
        self.window = VisibilityWindow(self.board, self.state.caches)
        self.started = False
        self._last_update: Optional[WindowUpdate] = None
        # held while a command or start runs
        self._lock = threading.Lock()
        self._handlers: Dict[type, Callable[[Any], str]] = {
            Move: self._handle_move,
            MoveTo: self._handle_move_to,
            Collect: self._handle_collect,
            Deposit: self._handle_deposit,
            Reset: self._handle_reset,
        }

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------
    @property
    def settings(self) -> WorldSettings:
        return self.board.settings

    @property
    def player(self):
        return self.state.player

    @property
    def caches(self) -> Dict[Coordinate, Cache]:
        return self.state.caches

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> ViewModel:
        """
        Load the saved snapshot (if any) and materialize the window around
        the player. Newly spawned caches are persisted straight away.
        """
        with self._lock:
            return self._start()

    def _start(self) -> ViewModel:
        try:
            self.state = load_state(self.store, self.board, default_position=self.start_position)
        except GameLoadError as e:
            logger.warning("Failed to load saved state: %s. Starting fresh.", e)
            self.state = GameState.fresh(self.board, self.start_position)

        self.window.reset(self.state.caches)
        self.started = True
        logger.info(
            "Game started at %s with %d known caches and %d coins in hand",
            self.player.position, len(self.caches), len(self.player.coins),
        )
        update = self.window.update(self.player.position)
        saved, message = self._persist("Welcome back!" if len(self.player.path) > 1 else "Game started.")
        return self.view(True, message, update, saved=saved)

    def dispatch(self, command: Command) -> ViewModel:
        """Apply ``command`` and return the resulting view."""
        with self._lock:
            return self._dispatch(command)

    def _dispatch(self, command: Command) -> ViewModel:
        if not self.started:
            self._start()

        if isinstance(command, PositionLost):
            logger.warning("Position unavailable: %s", command.reason)
            return self.view(False, command.reason, self._current_window())

        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unknown command: {command!r}")

        self._last_update = None
        try:
            message = handler(command)
        except (ActionRejected, EmptyLedger) as e:
            logger.debug("Rejected %r: %s", command, e)
            return self.view(False, str(e), self._current_window())

        update = self._last_update or self._current_window()
        saved, message = self._persist(message)
        return self.view(True, message, update, saved=saved)

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------
    def _handle_move(self, command: Move) -> str:
        di, dj = command.direction.offset
        pos = self.player.position
        size = self.settings.tile_size
        self._relocate(Position(pos.lat + di * size, pos.lng + dj * size))
        return f"Moved {command.direction.name.lower()}."

    def _handle_move_to(self, command: MoveTo) -> str:
        self._relocate(command.position)
        return "Position updated."

    def _handle_collect(self, command: Collect) -> str:
        cache = self._reachable_cache(command.cell)
        coin = cache.collect_one()
        self.player.coins.append(coin)
        return f"Collected coin {coin}."

    def _handle_deposit(self, command: Deposit) -> str:
        cache = self._reachable_cache(command.cell)
        coins = self.player.coins
        if not coins:
            raise EmptyInventory("No coins in your inventory to deposit.")
        if command.coin is None:
            coin = coins.pop()
        else:
            try:
                coins.remove(command.coin)
            except ValueError:
                raise ActionRejected(f"Coin {command.coin} is not in your inventory.") from None
            coin = command.coin
        cache.deposit_one(coin)
        return f"Deposited coin {coin}."

    def _handle_reset(self, command: Reset) -> str:
        try:
            clear_state(self.store)
        except GameSaveError as e:
            logger.error("Failed to clear saved state: %s", e)
        self.state = GameState.fresh(self.board, self.start_position)
        self.window.reset(self.state.caches)
        self._last_update = self.window.update(self.player.position)
        logger.info("Game reset")
        return "Game reset."

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _relocate(self, position: Position) -> None:
        player = self.player
        player.position = position
        player.cell = self.board.cell_for_position(position).key
        player.path.append(position)
        self._last_update = self.window.update(position)

    def _reachable_cache(self, key: Coordinate) -> Cache:
        cache = self.caches.get(key)
        if cache is None or not self.window.is_visible(key):
            raise CacheOutOfReach(f"There is no visible cache at {key[0]},{key[1]}.")
        if not self.in_reach(key):
            raise CacheOutOfReach("You need to be closer to interact with this cache.")
        return cache

    def in_reach(self, key: Coordinate) -> bool:
        """True if the cache cell ``key`` is within the interaction radius of the player."""
        here = self.board.cell_at(*self.player.cell)
        there = self.board.cell_at(*key)
        return self.board.chebyshev_distance(here, there) <= self.settings.interaction_radius

    def _current_window(self) -> WindowUpdate:
        return WindowUpdate(visible=self.window.visible)

    def _persist(self, message: str) -> Tuple[bool, str]:
        try:
            save_state(self.state, self.store)
        except GameSaveError as e:
            logger.error("Failed to save game state: %s", e)
            return False, f"{message} (progress not saved: {e})"
        return True, message

    def view(self, ok: bool, message: str, update: WindowUpdate, *, saved: bool = True) -> ViewModel:
        player = self.player
        visible = []
        for key in sorted(self.window.visible):
            cache = self.caches[key]
            visible.append(
                CacheView(
                    cell=key,
                    coins=cache.coins,
                    bounds=self.board.bounds_of(cache.cell),
                    center=self.board.center_of(cache.cell),
                    in_reach=self.in_reach(key),
                )
            )
        return ViewModel(
            ok=ok,
            message=message,
            position=player.position,
            cell=player.cell,
            coins=tuple(player.coins),
            path=tuple(player.path),
            caches=tuple(visible),
            window=update,
            saved=saved,
        )

    def step(self, direction: str) -> ViewModel:
        """Shorthand for ``dispatch(Move(Direction.from_name(direction)))``."""
        return self.dispatch(Move(Direction.from_name(direction)))


__all__ = ["ActionRejected", "CacheOutOfReach", "EmptyInventory", "Game"]
