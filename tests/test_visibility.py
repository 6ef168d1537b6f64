import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

import game.visibility as visibility
from game.visibility import VisibilityWindow
from world.board import Board
from world.cell import Cell, Position
from world.generation import should_spawn
from world.settings import WorldSettings


def make_window(radius=2, probability=0.3, caches=None):
    board = Board(
        WorldSettings(tile_size=1.0, visibility_radius=radius, spawn_probability=probability)
    )
    return VisibilityWindow(board, {} if caches is None else caches)


def expected_visible(window, position):
    p = window.board.settings.spawn_probability
    return {
        c.key
        for c in window.board.cells_within_radius(position)
        if should_spawn(c.i, c.j, p)
    }


def count_spawn_checks(monkeypatch):
    calls = []
    real = visibility.should_spawn

    def counting(i, j, p):
        calls.append((i, j))
        return real(i, j, p)

    monkeypatch.setattr(visibility, "should_spawn", counting)
    return calls


def test_window_matches_spawned_cells_after_moves():
    window = make_window(radius=2, probability=0.3)
    path = [Position(0.5, 0.5), Position(0.5, 1.5), Position(3.5, 1.5), Position(-4.5, 9.5), Position(0.5, 0.5)]
    for position in path:
        update = window.update(position)
        assert update.visible == expected_visible(window, position)
        assert window.visible == update.visible


def test_update_reports_shown_and_hidden():
    window = make_window(radius=1, probability=1.0)
    first = window.update(Position(0.5, 0.5))
    assert len(first.spawned) == 9
    assert sorted(first.shown) == sorted(first.spawned)
    assert first.hidden == []

    second = window.update(Position(0.5, 1.5))
    assert sorted(second.spawned) == [(-1, 2), (0, 2), (1, 2)]
    assert second.hidden == [(-1, -1), (0, -1), (1, -1)]
    assert sorted(second.shown) == [(-1, 2), (0, 2), (1, 2)]
    # hidden caches stay materialized
    assert (0, -1) in window.caches


def test_consider_is_idempotent(monkeypatch):
    calls = count_spawn_checks(monkeypatch)
    window = make_window(probability=1.0)
    cell = window.board.cell_at(7, 7)
    first = window.consider(cell)
    second = window.consider(Cell(7, 7))
    assert first is second
    assert len(window.caches) == 1
    assert calls == [(7, 7)]


def test_absent_decision_is_remembered(monkeypatch):
    calls = count_spawn_checks(monkeypatch)
    window = make_window(probability=0.0)
    cell = window.board.cell_at(1, 1)
    assert window.consider(cell) is None
    assert window.consider(cell) is None
    assert window.is_absent((1, 1))
    assert calls == [(1, 1)]


def test_existing_cache_is_never_regenerated(monkeypatch):
    window = make_window(radius=1, probability=1.0)
    window.update(Position(0.5, 0.5))
    cache = window.caches[(0, 0)]
    while len(cache):
        cache.collect_one()

    calls = count_spawn_checks(monkeypatch)
    window.update(Position(5.5, 5.5))
    window.update(Position(0.5, 0.5))
    assert window.caches[(0, 0)] is cache
    assert len(cache) == 0
    assert (0, 0) not in calls


def test_visibility_does_not_touch_ledgers():
    window = make_window(radius=1, probability=1.0)
    window.update(Position(0.5, 0.5))
    before = {k: c.coins for k, c in window.caches.items()}
    window.update(Position(10.5, 10.5))
    window.update(Position(0.5, 0.5))
    for key, coins in before.items():
        assert window.caches[key].coins == coins


def test_move_east_with_radius_eight(monkeypatch):
    calls = count_spawn_checks(monkeypatch)
    window = make_window(radius=8, probability=0.05)
    start = Position(0.5, 0.5)
    window.update(start)
    first_round = set(calls)
    assert len(first_round) == 17 * 17

    calls.clear()
    east = Position(0.5, 1.5)
    update = window.update(east)

    # only the new leading column is decided, each cell once
    assert sorted(calls) == [(i, 9) for i in range(-8, 9)]
    assert not first_round & set(calls)
    # (0, 0) is one column behind the new centre and stays inside the window
    if (0, 0) in window.caches:
        assert (0, 0) in update.visible
    # the trailing column drops out
    assert all(key[1] != -8 for key in update.visible)
    assert update.visible == expected_visible(window, east)


def test_reset_forgets_decisions():
    window = make_window(radius=1, probability=0.0)
    window.update(Position(0.5, 0.5))
    assert window.is_absent((0, 0))
    window.reset({})
    assert not window.is_absent((0, 0))
    assert window.visible == frozenset()
