"""
Monte Carlo Tree Search (MCTS) algorithm for the dungeon planner.

This module implements the core MCTS algorithm with the four standard phases:
1. Selection: Descend the tree with UCB1 to a node worth expanding
2. Expansion: Attach one child for a random untried move
3. Simulation: Run a short random walk and score where it ends
4. Backpropagation: Add the score to every node on the path to the root

A fresh tree is built from one clone of the live state for every decision
and dropped once the action has been read off the root.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple
import logging
import random
import time

from dungeon_ai.core.actions import Action, get_valid_moves
from dungeon_ai.core.world import WorldState
from dungeon_ai.mcts.config import MCTSConfig
from dungeon_ai.mcts.evaluation import evaluate
from dungeon_ai.mcts.node import MCTSNode

logger = logging.getLogger(__name__)


def mcts_search(
    state: WorldState,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None
) -> Tuple[Action, Dict[str, Any]]:
    """
    Run Monte Carlo Tree Search to find the best action.

    This function runs the full MCTS algorithm:
    1. Create a root node from a clone of the live state
    2. Run ``config.iterations`` rounds of selection, expansion,
       simulation and backpropagation
    3. Return the action of the root child with the best mean value

    The live state is never modified. Without a living hero, or on a
    halted state, IDLE is returned without searching.

    Args:
        state: Current world state
        config: MCTS configuration parameters
        rng: Random source (seeded from ``config.seed`` if None)

    Returns:
        Tuple of (best action, search statistics)
    """
    if config is None:
        config = MCTSConfig()
    if rng is None:
        rng = random.Random(config.seed)

    stats: Dict[str, Any] = {
        "iterations": 0,
        "node_count": 0,
        "max_depth": 0,
        "total_rollout_steps": 0,
        "time_elapsed": 0.0,
        "action_visits": {},
        "action_values": {},
        "principal_variation": [],
        "used_fallback": False,
        "short_circuit": False,
    }

    if not state.hero_alive() or state.is_terminal():
        stats["short_circuit"] = True
        logger.debug("No living hero or halted game, returning IDLE")
        return Action.IDLE, stats

    start_time = time.time()
    root = build_search_tree(state, config, rng, stats)

    best = root.best_child(0.0)
    if best is not None:
        best_action = best.action
    else:
        # Nothing could be expanded from the root
        valid_moves = get_valid_moves(state)
        best_action = valid_moves[0] if valid_moves else Action.IDLE
        stats["used_fallback"] = True

    for child in root.children:
        stats["action_visits"][str(child.action)] = child.visits
        stats["action_values"][str(child.action)] = child.mean_value

    stats["root_visits"] = root.visits
    stats["node_count"] = count_nodes(root)
    stats["max_depth"] = tree_depth(root)
    stats["principal_variation"] = [
        (str(action), value) for action, value in get_principal_variation(root)
    ]
    stats["time_elapsed"] = time.time() - start_time
    stats["iterations_per_second"] = stats["iterations"] / max(0.001, stats["time_elapsed"])
    stats["average_rollout_steps"] = stats["total_rollout_steps"] / max(1, stats["iterations"])

    logger.debug(
        "MCTS chose %s after %d iterations (%d nodes, depth %d, fallback=%s)",
        best_action, stats["iterations"], stats["node_count"],
        stats["max_depth"], stats["used_fallback"]
    )
    return best_action, stats


def build_search_tree(
    state: WorldState,
    config: MCTSConfig,
    rng: random.Random,
    stats: Optional[Dict[str, Any]] = None
) -> MCTSNode:
    """
    Grow a search tree rooted at a clone of ``state``.

    Args:
        state: World state to search from (not modified)
        config: MCTS configuration parameters
        rng: Random source
        stats: Optional statistics dictionary; ``iterations`` and
            ``total_rollout_steps`` are accumulated into it

    Returns:
        The root node after ``config.iterations`` iterations
    """
    root = MCTSNode(state=state.clone())

    for _ in range(config.iterations):
        # 1. Selection
        node = select_node(root, config.exploration_weight)

        # 2. Expansion
        if not node.is_terminal():
            node = expand_node(node, rng)

        # 3. Simulation
        value, steps = simulate_rollout(node.state, config, rng)

        # 4. Backpropagation
        backpropagate(node, value)

        if stats is not None:
            stats["iterations"] = stats.get("iterations", 0) + 1
            stats["total_rollout_steps"] = stats.get("total_rollout_steps", 0) + steps

    return root


def choose_action(
    state: WorldState,
    config: Optional[MCTSConfig] = None,
    rng: Optional[random.Random] = None
) -> Action:
    """
    Pick the next hero action for ``state``.

    Args:
        state: Current world state
        config: MCTS configuration parameters
        rng: Random source

    Returns:
        One of the five actions; IDLE when there is nothing sensible to do
    """
    action, _ = mcts_search(state, config, rng)
    return action


def select_node(root: MCTSNode, exploration_weight: float) -> MCTSNode:
    """
    Descend from the root with UCB1.

    Descent continues while the current node is non-terminal and fully
    expanded, and stops at a terminal node, a node with untried actions,
    or a node without children.

    Args:
        root: Root node of the MCTS tree
        exploration_weight: UCB1 exploration parameter

    Returns:
        Node to expand or simulate from
    """
    node = root
    while not node.is_terminal() and node.is_fully_expanded():
        child = node.best_child(exploration_weight)
        if child is None:
            break
        node = child
    return node


def expand_node(node: MCTSNode, rng: random.Random) -> MCTSNode:
    """
    Expand a node by one random untried action.

    Args:
        node: Node to expand
        rng: Random source

    Returns:
        The new child, or ``node`` itself when nothing is left to expand
    """
    action = node.take_untried_action(rng)
    if action is Action.IDLE:
        return node

    next_state = node.state.clone()
    next_state.apply(action)
    return node.add_child(next_state, action)


def simulate_rollout(
    state: WorldState,
    config: MCTSConfig,
    rng: random.Random
) -> Tuple[float, int]:
    """
    Random walk from ``state`` and score where it ends.

    The walk works on a copy and stops early on a halted game, a missing or
    dead hero, or when no legal move exists.

    Args:
        state: State to simulate from (left untouched)
        config: MCTS configuration parameters
        rng: Random source

    Returns:
        Tuple of (evaluation of the final state, number of steps taken)
    """
    sim_state = state.clone()
    steps = 0
    for _ in range(config.rollout_depth):
        if sim_state.is_terminal() or not sim_state.hero_alive():
            break
        moves = get_valid_moves(sim_state)
        if not moves:
            break
        sim_state.apply(moves[rng.randrange(len(moves))])
        steps += 1
    return evaluate(sim_state, config), steps


def backpropagate(node: MCTSNode, value: float) -> None:
    """
    Update statistics up the tree.

    Every node from ``node`` up to and including the root gets one more
    visit and ``value`` added to its total.

    Args:
        node: Node the simulation started from
        value: Simulation result
    """
    current = node
    while current is not None:
        current.update(value)
        current = current.parent


def count_nodes(node: MCTSNode) -> int:
    """
    Count the total number of nodes in the tree.

    Args:
        node: Root node of the tree

    Returns:
        Total number of nodes
    """
    count = 1
    for child in node.children:
        count += count_nodes(child)
    return count


def tree_depth(node: MCTSNode) -> int:
    """Length of the longest path below ``node``."""
    if not node.children:
        return 0
    return 1 + max(tree_depth(child) for child in node.children)


def get_principal_variation(root: MCTSNode, max_depth: int = 10) -> List[Tuple[Action, float]]:
    """
    Get the principal variation (most visited path) from the root.

    This is useful for analysis and debugging.

    Args:
        root: Root node of the MCTS tree
        max_depth: Maximum depth to explore

    Returns:
        List of (action, mean value) pairs along the most visited path
    """
    result = []
    current = root
    while current.children and len(result) < max_depth:
        best = max(current.children, key=lambda c: c.visits)
        result.append((best.action, best.mean_value))
        current = best
    return result


def get_action_statistics(root: MCTSNode, exploration_weight: float = 0.0) -> Dict[str, Dict[str, float]]:
    """
    Get statistics for all actions from the root.

    Args:
        root: Root node of the MCTS tree
        exploration_weight: Weight used for the reported UCB1 score

    Returns:
        Dictionary mapping action names to statistics
    """
    return {
        str(child.action): {
            "visits": child.visits,
            "value": child.total_value,
            "mean_value": child.mean_value,
            "ucb": root.ucb_score(child, exploration_weight),
        }
        for child in root.children
    }
