from __future__ import annotations

"""Control panel for moving the player and trading coins with caches, using DearPyGui."""

import time
from typing import Optional

import dearpygui.dearpygui as dpg

from game import settings
from game.commands import CacheView, Collect, Command, Deposit, Move, Reset, ViewModel
from game.game import Game
from game.location import LocationTracker
from game.models import Direction


class ControlPanel:
    def __init__(self, game: Game, tracker: Optional[LocationTracker] = None) -> None:
        self.game = game
        self.tracker = tracker
        self.view: ViewModel = game.start()
        self._dirty = True
        self._last_poll = 0.0

        dpg.create_context()
        dpg.create_viewport(title="Geocoin Carrier", width=420, height=560)
        with dpg.window(tag="_panel_window", width=420, height=560, no_move=True, no_resize=True, no_title_bar=True):
            with dpg.group(horizontal=True):
                for direction in Direction:
                    dpg.add_button(
                        label=direction.name.title(),
                        callback=self._make_callback(Move(direction)),
                    )
            with dpg.group(horizontal=True):
                dpg.add_button(label="Reset", callback=self._make_callback(Reset()))
                if tracker is not None:
                    dpg.add_checkbox(label="Track location", tag="_tracking", callback=self._toggle_tracking)
            self.status = dpg.add_text("")
            self.position_text = dpg.add_text("")
            self.message_text = dpg.add_text("")
            dpg.add_separator()
            self.container = dpg.add_child_window(height=-1)
        dpg.set_primary_window("_panel_window", True)
        with dpg.handler_registry():
            dpg.add_key_press_handler(callback=self._on_key)
        # callbacks are queued and run from mainloop, on the same thread as the tracker
        dpg.configure_app(manual_callback_management=True)
        dpg.setup_dearpygui()
        dpg.show_viewport()

    # event callbacks
    def _make_callback(self, command: Command):
        def cb(sender=None, app_data=None):
            self._apply(self.game.dispatch(command))
        return cb

    def _on_key(self, sender, app_data):
        keys = {
            dpg.mvKey_Up: Direction.NORTH,
            dpg.mvKey_Down: Direction.SOUTH,
            dpg.mvKey_Right: Direction.EAST,
            dpg.mvKey_Left: Direction.WEST,
        }
        direction = keys.get(app_data)
        if direction is not None:
            self._apply(self.game.dispatch(Move(direction)))

    def _toggle_tracking(self, sender, app_data):
        if self.tracker is None:
            return
        if app_data:
            self.tracker.enable()
        else:
            self.tracker.disable()

    def _apply(self, view: Optional[ViewModel]) -> None:
        if view is None:
            return
        self.view = view
        self._dirty = True

    def _poll_tracker(self) -> None:
        if self.tracker is None:
            return
        now = time.time()
        if now - self._last_poll < settings.TRACKING_POLL_SECONDS:
            return
        self._last_poll = now
        self._apply(self.tracker.poll())
        dpg.set_value("_tracking", self.tracker.enabled)

    def _add_cache_row(self, cache: CacheView) -> None:
        i, j = cache.cell
        with dpg.group(parent=self.container):
            dpg.add_text(f"Cache {i},{j}: {cache.coin_count} coins")
            if cache.coins:
                dpg.add_text(", ".join(str(c) for c in cache.coins), wrap=380)
            with dpg.group(horizontal=True):
                dpg.add_button(
                    label="Collect",
                    enabled=cache.in_reach,
                    callback=self._make_callback(Collect(cache.cell)),
                )
                dpg.add_button(
                    label="Deposit",
                    enabled=cache.in_reach,
                    callback=self._make_callback(Deposit(cache.cell)),
                )

    def _refresh(self) -> None:
        if not self._dirty:
            return
        view = self.view
        dpg.set_value(self.status, view.status)
        i, j = view.cell
        dpg.set_value(
            self.position_text,
            f"Position: {view.position.lat:.6f}, {view.position.lng:.6f} (cell {i},{j})",
        )
        dpg.set_value(self.message_text, view.message)
        dpg.delete_item(self.container, children_only=True)
        for cache in view.caches:
            self._add_cache_row(cache)
        self._dirty = False

    def mainloop(self) -> None:
        while dpg.is_dearpygui_running():
            dpg.run_callbacks(dpg.get_callback_queue())
            self._poll_tracker()
            self._refresh()
            dpg.render_dearpygui_frame()
        dpg.destroy_context()


def launch(game: Game, tracker: Optional[LocationTracker] = None) -> None:
    ui = ControlPanel(game, tracker)
    ui.mainloop()
