"""
Constants for the dungeon world.

This module defines the tile vocabulary of the ASCII dungeon layouts,
entity defaults, and scoring rules used by the reference dungeon.
"""
from enum import IntEnum
from typing import Dict, Final


class Tile(IntEnum):
    """Tile codes stored in the dungeon grid."""
    FLOOR = 0
    WALL = 1
    EXIT = 2
    POTION = 3
    TREASURE = 4


# Layout characters
WALL_CHAR: Final[str] = "#"
FLOOR_CHAR: Final[str] = "."
HERO_CHAR: Final[str] = "H"
EXIT_CHAR: Final[str] = "E"
MONSTER_CHAR: Final[str] = "M"
POTION_CHAR: Final[str] = "P"
TREASURE_CHAR: Final[str] = "T"

# Characters that map directly onto a tile (hero and monsters stand on floor)
TILE_CHARS: Final[Dict[str, Tile]] = {
    WALL_CHAR: Tile.WALL,
    FLOOR_CHAR: Tile.FLOOR,
    " ": Tile.FLOOR,
    EXIT_CHAR: Tile.EXIT,
    POTION_CHAR: Tile.POTION,
    TREASURE_CHAR: Tile.TREASURE,
}

TILE_SYMBOLS: Final[Dict[Tile, str]] = {
    Tile.FLOOR: FLOOR_CHAR,
    Tile.WALL: WALL_CHAR,
    Tile.EXIT: EXIT_CHAR,
    Tile.POTION: POTION_CHAR,
    Tile.TREASURE: TREASURE_CHAR,
}

# Hero defaults
HERO_HITPOINTS: Final[int] = 40
HERO_DAMAGE: Final[int] = 10

# Monster defaults
MONSTER_HITPOINTS: Final[int] = 15
MONSTER_DAMAGE: Final[int] = 5

# Item effects
POTION_HEAL: Final[int] = 10
TREASURE_SCORE: Final[int] = 5
MONSTER_SCORE: Final[int] = 3

# Random dungeon generation
DEFAULT_WALL_DENSITY: Final[float] = 0.2
DEFAULT_MONSTERS: Final[int] = 3
DEFAULT_POTIONS: Final[int] = 2
DEFAULT_TREASURES: Final[int] = 3
DEFAULT_EXITS: Final[int] = 2
MAX_GENERATION_ATTEMPTS: Final[int] = 100
