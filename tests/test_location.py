import json
import os
import sys

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from game.game import Game
from game.location import LocationTracker, PositionUnavailable, ScriptedFeed
from game.models import Direction
from game.persistence import MemoryStore
from world.cell import Position
from world.settings import WorldSettings


def make_game():
    return Game(
        MemoryStore(),
        world_settings=WorldSettings(tile_size=1.0, visibility_radius=1, spawn_probability=0.5),
        start_position=Position(0.5, 0.5),
    )


def test_disabled_tracker_ignores_feed():
    game = make_game()
    feed = ScriptedFeed([Position(4.5, 4.5)])
    tracker = LocationTracker(game, feed)
    assert tracker.poll() is None
    assert len(feed) == 1


def test_tracker_moves_player():
    game = make_game()
    tracker = LocationTracker(game, ScriptedFeed([Position(4.5, 4.5), Position(-2.5, 1.5)]))
    tracker.enable()
    assert tracker.poll().cell == (4, 4)
    view = tracker.poll()
    assert view.cell == (-3, 1)
    assert len(view.path) == 3
    assert tracker.poll() is None


def test_feed_failure_disables_tracking():
    game = make_game()
    feed = ScriptedFeed([PositionUnavailable("permission denied"), Position(9.5, 9.5)])
    tracker = LocationTracker(game, feed)
    assert tracker.toggle() is True
    view = tracker.poll()
    assert not view.ok
    assert "permission denied" in view.message
    assert not tracker.enabled
    assert game.player.position == Position(0.5, 0.5)
    # no further moves until re-enabled
    assert tracker.poll() is None
    tracker.enable()
    assert tracker.poll().cell == (9, 9)


class CompassFeed:
    """Feed that walks one cell east per fix."""

    def __init__(self, start, steps):
        self.position = start
        self.steps = steps

    def poll(self):
        if not self.steps:
            return None
        self.steps -= 1
        self.position = Position(self.position.lat, self.position.lng + 1.0)
        return self.position


def test_tracker_accepts_any_position_feed():
    game = make_game()
    tracker = LocationTracker(game, CompassFeed(Position(0.5, 0.5), 2))
    tracker.enable()
    assert tracker.poll().cell == (0, 1)
    assert tracker.poll().cell == (0, 2)
    assert tracker.poll() is None
    assert game.player.position == Position(0.5, 2.5)


def test_replay_file(tmp_path):
    path = tmp_path / "walk.json"
    path.write_text(json.dumps([[1.5, 2.5], [3, 4]]), encoding="utf-8")
    feed = ScriptedFeed.from_file(path)
    assert feed.poll() == Position(1.5, 2.5)
    assert feed.poll() == Position(3.0, 4.0)
    assert feed.poll() is None


def test_replay_file_rejects_bad_entries(tmp_path):
    path = tmp_path / "walk.json"
    path.write_text(json.dumps([[1.5]]), encoding="utf-8")
    with pytest.raises(ValueError):
        ScriptedFeed.from_file(path)


def test_direction_lookup():
    assert Direction.from_name(" North ") is Direction.NORTH
    assert Direction.WEST.offset == (0, -1)
    with pytest.raises(ValueError):
        Direction.from_name("up")
