import argparse
import logging
from pathlib import Path
from typing import Optional

from game import settings
from game.commands import Reset
from game.game import Game
from game.location import LocationTracker, ScriptedFeed
from game.persistence import JsonFileStore, MemoryStore


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Walk the grid, collect coins from caches and deposit them elsewhere."
    )
    parser.add_argument(
        "--save-file",
        type=Path,
        default=settings.SAVE_FILE,
        help="Where game progress is stored (default: %(default)s)",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Keep the game state in memory only",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Wipe saved progress before starting",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        help="JSON file of [lat, lng] pairs fed to location tracking",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = MemoryStore() if args.no_save else JsonFileStore(args.save_file)
    game = Game(store)
    if args.reset:
        view = game.dispatch(Reset())
        print(view.message)

    tracker = None
    if args.replay is not None:
        tracker = LocationTracker(game, ScriptedFeed.from_file(args.replay))

    # Imported late so --help works without a display
    from ui.control_panel import launch

    try:
        launch(game, tracker)
    except KeyboardInterrupt:
        print("\nStopping game...")


if __name__ == "__main__":
    main()
