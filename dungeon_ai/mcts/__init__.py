"""
Monte Carlo Tree Search (MCTS) planner for the dungeon.

This package provides an MCTS agent that picks the hero's next move without
any training. Each decision works on a fresh tree built from a clone of the
live world state:

1. Selection: Starting from the root node, select child nodes using UCB1 while
   the node is fully expanded and the game is not over.
2. Expansion: Create a new child node by taking a random untried move.
3. Simulation: From the new node, perform a short random walk and score the
   state it ends in.
4. Backpropagation: Add the score to every node on the path to the root.

The agent can be configured with the number of iterations, the rollout depth,
the exploration constant and the weights of the evaluation heuristic.
"""

from dungeon_ai.mcts.node import MCTSNode
from dungeon_ai.mcts.agent import MCTSAgent, MCTSAgentFactory
from dungeon_ai.mcts.evaluation import evaluate, get_target_exit
from dungeon_ai.mcts.search import (
    mcts_search,
    build_search_tree,
    choose_action,
    select_node,
    expand_node,
    simulate_rollout,
    backpropagate
)
from dungeon_ai.mcts.config import MCTSConfig

__all__ = [
    'MCTSAgent',
    'MCTSAgentFactory',
    'MCTSNode',
    'MCTSConfig',
    'mcts_search',
    'build_search_tree',
    'choose_action',
    'select_node',
    'expand_node',
    'simulate_rollout',
    'backpropagate',
    'evaluate',
    'get_target_exit'
]
