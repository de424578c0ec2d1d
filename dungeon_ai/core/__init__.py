"""
Dungeon AI Core Package

This package contains the world the agents act in, including:
- The abstract world-state contract used by the planner
- A reference grid dungeon with walls, monsters, items and exits
- Hero actions and grid coordinates
- Constants for tiles, entities and scoring

All core components can be imported directly from this package.
"""

# World state
from dungeon_ai.core.world import (
    WorldState, DungeonMap, Hero, Monster,
    create_dungeon, generate_dungeon, simulate_random_game
)

# Actions
from dungeon_ai.core.actions import (
    Action, Point, MOVE_ACTIONS,
    next_position, get_valid_moves
)

# Constants
from dungeon_ai.core.constants import (
    Tile, TREASURE_SCORE, MONSTER_SCORE, POTION_HEAL,
    HERO_HITPOINTS, MONSTER_DAMAGE
)

__all__ = [
    # World
    'WorldState', 'DungeonMap', 'Hero', 'Monster',
    'create_dungeon', 'generate_dungeon', 'simulate_random_game',

    # Actions
    'Action', 'Point', 'MOVE_ACTIONS',
    'next_position', 'get_valid_moves',

    # Constants
    'Tile', 'TREASURE_SCORE', 'MONSTER_SCORE', 'POTION_HEAL',
    'HERO_HITPOINTS', 'MONSTER_DAMAGE'
]
