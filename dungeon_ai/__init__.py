"""
Dungeon AI - A Monte Carlo Tree Search planner for grid dungeon agents.

This package provides a planner that picks the next move of a hero in a grid
dungeon with walls, monsters, items and exits, along with a small reference
dungeon and baseline agents to compare against.
"""

__version__ = "0.1.0"
__author__ = "Dungeon AI Team"

# Make key components available at package level
from dungeon_ai.core.world import WorldState, DungeonMap, create_dungeon
from dungeon_ai.core.actions import Action, Point
from dungeon_ai.mcts.agent import MCTSAgent
from dungeon_ai.mcts.config import MCTSConfig

# Version info as a tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split('.')))
