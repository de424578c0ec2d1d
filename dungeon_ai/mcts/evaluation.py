"""
State evaluation for dungeon rollouts.

The heuristic rewards survival above everything, then reaching an exit,
closeness to the target exit, in-game score and remaining hit points.
It never raises: missing information degrades to the most pessimistic value.
"""
from typing import Optional
import math

from dungeon_ai.core.actions import Point
from dungeon_ai.core.world import WorldState
from dungeon_ai.mcts.config import MCTSConfig


def get_target_exit(state: WorldState) -> Optional[Point]:
    """
    Get the exit the hero is steered towards.

    The second exit is preferred when there is one, otherwise the only exit.

    Args:
        state: World state

    Returns:
        Exit cell, or None if the map has no exit
    """
    count = state.exit_count()
    if count <= 0:
        return None
    return state.get_exit(min(1, max(0, count - 1)))


def worst_case_distance(state: WorldState) -> float:
    size_x, size_y = state.map_size()
    return float(size_x + size_y)


def evaluate(state: WorldState, config: Optional[MCTSConfig] = None) -> float:
    """
    Score a world state.

    Args:
        state: State reached at the end of a rollout
        config: Evaluation weights (defaults when None)

    Returns:
        ``config.death_penalty`` without a living hero, otherwise
        terminal bonus - distance to target exit + weighted score and hit points
    """
    config = config or MCTSConfig()

    if not state.hero_alive():
        return config.death_penalty

    value = 0.0
    if state.is_terminal():
        value += config.terminal_bonus

    target = get_target_exit(state)
    distance = state.distance_to(target) if target is not None else math.nan
    if distance is None or math.isnan(distance):
        distance = worst_case_distance(state)
    value -= distance

    value += state.score() * config.score_weight
    value += state.hitpoints() * config.hitpoint_weight
    return value
