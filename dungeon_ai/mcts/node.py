"""
Monte Carlo Tree Search Node for the dungeon planner.

This module defines the MCTSNode class which represents a node in the MCTS tree.
Each node owns a world-state snapshot, its statistics (visits, accumulated
value), the children expanded from it and the moves not yet expanded.
"""
from __future__ import annotations
from typing import List, Optional
import math
import random

from dungeon_ai.core.actions import Action, get_valid_moves
from dungeon_ai.core.world import WorldState


class MCTSNode:
    """
    A node in the Monte Carlo Tree Search.

    Each node represents a world state and tracks statistics about
    simulations that pass through it. Parents own their children; the
    ``parent`` link only points back up the tree.
    """

    def __init__(
        self,
        state: WorldState,
        parent: Optional['MCTSNode'] = None,
        action: Action = Action.IDLE,
    ):
        """
        Initialize an MCTS node.

        Args:
            state: The world state this node owns (not shared with other nodes)
            parent: The parent node (None for root)
            action: The action that led to this state (IDLE for root)
        """
        self.state = state
        self.parent = parent
        self.action = action

        # Node statistics
        self.visits = 0
        self.total_value = 0.0
        self.children: List[MCTSNode] = []

        # Legal moves not yet expanded, fixed at creation
        self.untried_actions: List[Action] = get_valid_moves(state)

    @property
    def mean_value(self) -> float:
        return self.total_value / self.visits if self.visits > 0 else 0.0

    def is_terminal(self) -> bool:
        """
        Check if this node represents a finished game.

        Returns:
            True if the game halted or there is no living hero
        """
        return self.state.is_terminal() or not self.state.hero_alive()

    def is_fully_expanded(self) -> bool:
        """
        Check if all legal moves from this node have been expanded.

        Returns:
            True if no untried actions remain
        """
        return not self.untried_actions

    def take_untried_action(self, rng: random.Random) -> Action:
        """
        Remove and return a uniformly random untried action.

        Args:
            rng: Random source

        Returns:
            The drawn action, or IDLE when nothing is left to expand
        """
        if not self.untried_actions:
            return Action.IDLE
        index = rng.randrange(len(self.untried_actions))
        return self.untried_actions.pop(index)

    def add_child(self, state: WorldState, action: Action) -> 'MCTSNode':
        """
        Attach a child produced by ``action``.

        Args:
            state: The child's state, already advanced by ``action``
            action: Action leading from this node to the child

        Returns:
            The new child node
        """
        child = MCTSNode(state=state, parent=self, action=action)
        self.children.append(child)
        return child

    def ucb_score(self, child: 'MCTSNode', exploration_weight: float) -> float:
        """
        Calculate the UCB1 score for a child node.

        UCB1 = mean_value + exploration_weight * sqrt(ln(parent_visits + 1) / child_visits)

        Args:
            child: Child node to calculate score for
            exploration_weight: Weight of the exploration term

        Returns:
            UCB1 score, infinite for an unvisited child
        """
        if child.visits == 0:
            return float('inf')

        exploitation = child.total_value / child.visits
        exploration = math.sqrt(math.log(self.visits + 1) / child.visits)
        return exploitation + exploration_weight * exploration

    def best_child(self, exploration_weight: float) -> Optional['MCTSNode']:
        """
        Select a child with the UCB1 formula.

        Unvisited children win outright, in expansion order. Among visited
        children the first one with the highest score is kept.

        Args:
            exploration_weight: Weight for the exploration term (0 = pure exploitation)

        Returns:
            Best child node, or None if there are no children
        """
        best = None
        best_score = float('-inf')
        for child in self.children:
            if child.visits == 0:
                return child
            score = self.ucb_score(child, exploration_weight)
            if score > best_score:
                best_score = score
                best = child
        return best

    def update(self, value: float) -> None:
        """
        Record one simulation result.

        Args:
            value: Rollout reward
        """
        self.visits += 1
        self.total_value += value

    def __str__(self) -> str:
        return (f"MCTSNode(action={self.action}, "
                f"visits={self.visits}, "
                f"value={self.mean_value:.2f}, "
                f"children={len(self.children)}, "
                f"untried={len(self.untried_actions)})")
