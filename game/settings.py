# Settings for the game

from pathlib import Path

from world.cell import Position

# Where a fresh game (or a reset) puts the player: the Oakes College classroom.
START_POSITION = Position(36.98949379578401, -122.06277128548504)

# Default location of the save file.
SAVE_FILE = Path("geocoin_save.json")

# How often the control panel polls the position feed, in seconds.
TRACKING_POLL_SECONDS = 1.0
