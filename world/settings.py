from __future__ import annotations

"""Configuration dataclass for the cache grid."""

from dataclasses import dataclass


@dataclass
class WorldSettings:
    # Edge length of one grid cell, in degrees of latitude/longitude.
    tile_size: float = 1e-4
    # Chebyshev radius (in cells) of the visibility window around the player.
    visibility_radius: int = 8
    spawn_probability: float = 0.05
    max_initial_coins: int = 10
    # Chebyshev radius (in cells) within which caches can be interacted with.
    interaction_radius: int = 1


__all__ = ["WorldSettings"]
