"""
Baseline agents for the dungeon.

These agents do no search. They serve as points of comparison for the MCTS
planner in demos and tests.
"""
from abc import ABC, abstractmethod
from typing import Optional
import math
import random

from dungeon_ai.core.actions import Action, get_valid_moves
from dungeon_ai.core.world import WorldState
from dungeon_ai.mcts.evaluation import get_target_exit


class Agent(ABC):
    """Base class for dungeon controllers."""

    name: str

    @abstractmethod
    def choose_action(self, state: WorldState) -> Action:
        """
        Select the next hero action.

        Args:
            state: Current world state

        Returns:
            Selected action
        """

    def select_action(self, state: WorldState) -> Action:
        return self.choose_action(state)

    def __str__(self) -> str:
        return self.name


class RandomAgent(Agent):
    """
    Agent that selects actions randomly.

    This agent serves as a baseline for comparison with more sophisticated agents.
    """

    def __init__(self, name: str = "Random Agent", rng: Optional[random.Random] = None):
        self.name = name
        self.rng = rng or random.Random()

    def choose_action(self, state: WorldState) -> Action:
        """
        Select a random legal move.

        Returns:
            Randomly selected move, or IDLE if there is none
        """
        moves = get_valid_moves(state)
        if not moves:
            return Action.IDLE
        return self.rng.choice(moves)


class GreedyAgent(Agent):
    """
    Agent that always steps to the neighbour closest to the target exit.

    Monsters and items are ignored. Ties keep the first move in
    UP, RIGHT, DOWN, LEFT order.
    """

    def __init__(self, name: str = "Greedy Agent"):
        self.name = name

    def choose_action(self, state: WorldState) -> Action:
        moves = get_valid_moves(state)
        if not moves:
            return Action.IDLE

        target = get_target_exit(state)
        if target is None:
            return moves[0]

        best_move = moves[0]
        best_distance = math.inf
        for move in moves:
            probe = state.clone()
            probe.apply(move)
            if probe.is_terminal() and probe.hero_alive():
                return move
            distance = probe.distance_to(target)
            if not math.isnan(distance) and distance < best_distance:
                best_distance = distance
                best_move = move
        return best_move
