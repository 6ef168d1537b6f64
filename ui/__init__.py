"""DearPyGui front end for the game controller."""
