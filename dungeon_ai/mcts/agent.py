"""
Monte Carlo Tree Search Agent for the dungeon.

This module provides the MCTSAgent class, a ready-to-use controller that
plans every hero move with Monte Carlo Tree Search. The agent can be
configured with different parameters and keeps statistics about its searches.
"""
from typing import Any, Dict, List, Optional, Tuple
import json
import logging
import math
import random
import time

from dungeon_ai.core.actions import Action
from dungeon_ai.core.world import WorldState
from dungeon_ai.mcts.config import MCTSConfig
from dungeon_ai.mcts.search import mcts_search

logger = logging.getLogger(__name__)


class MCTSAgent:
    """
    Monte Carlo Tree Search agent for the dungeon.

    Every call to ``choose_action`` builds a new search tree from a clone of
    the given state, so the agent never holds on to stale trees between turns.
    """

    def __init__(
        self,
        config: Optional[MCTSConfig] = None,
        name: str = "MCTS Agent",
        verbose: bool = False,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize an MCTS agent.

        Args:
            config: MCTS configuration parameters
            name: Name of the agent
            verbose: Whether to print detailed information after each search
            rng: Random source used for all sampling (seeded from
                ``config.seed`` if None)
        """
        self.config = config or MCTSConfig()
        self.name = name
        self.verbose = verbose
        self.rng = rng if rng is not None else random.Random(self.config.seed)

        # Statistics from the most recent search
        self.last_stats: Dict[str, Any] = {}

        # History of all actions and their statistics
        self.action_history: List[Tuple[Action, Dict[str, Any]]] = []

    def choose_action(self, state: WorldState) -> Action:
        """
        Select the next hero action using Monte Carlo Tree Search.

        Args:
            state: Current world state (not modified)

        Returns:
            Selected action
        """
        start_time = time.time()
        action, stats = mcts_search(state, self.config, self.rng)
        stats["total_time"] = time.time() - start_time

        if stats["used_fallback"]:
            logger.debug("%s: root had no children, fell back to %s", self.name, action)

        self.last_stats = stats
        self.action_history.append((action, stats))

        if self.verbose:
            self._print_search_info(action, stats)

        return action

    # Same call shape as the baseline agents
    select_action = choose_action

    def _print_search_info(self, action: Action, stats: Dict[str, Any]) -> None:
        """
        Print information about the search.

        Args:
            action: Selected action
            stats: Search statistics
        """
        print(f"\n{self.name} selected: {action}")
        if stats.get("short_circuit"):
            print("No living hero or game over, search skipped")
            return
        print(f"Iterations: {stats['iterations']}")
        print(f"Time: {stats['time_elapsed']:.3f}s ({stats['iterations_per_second']:.1f} it/s)")
        print(f"Nodes: {stats['node_count']}")
        print(f"Max depth: {stats['max_depth']}")

        if stats['action_visits']:
            print("\nActions:")
            actions_by_visits = sorted(
                stats['action_visits'].items(),
                key=lambda x: x[1],
                reverse=True
            )
            for i, (action_str, visits) in enumerate(actions_by_visits):
                value = stats['action_values'].get(action_str, 0.0)
                print(f"{i+1}. {action_str} - {visits} visits, {value:.1f} value")

    def get_last_statistics(self) -> Dict[str, Any]:
        """
        Get statistics from the most recent search.

        Returns:
            Dictionary of search statistics
        """
        return self.last_stats

    def get_principal_variation(self) -> List[Tuple[str, float]]:
        """
        Get the principal variation (most visited path) from the last search.

        Returns:
            List of (action name, mean value) pairs
        """
        return list(self.last_stats.get("principal_variation", []))

    def get_action_statistics(self) -> Dict[str, Dict[str, float]]:
        """
        Get visit counts and mean values of the root moves from the last search.

        Returns:
            Dictionary mapping action names to statistics
        """
        visits = self.last_stats.get("action_visits", {})
        values = self.last_stats.get("action_values", {})
        return {
            action: {"visits": count, "mean_value": values.get(action, 0.0)}
            for action, count in visits.items()
        }

    def reset_statistics(self) -> None:
        """Reset all statistics."""
        self.last_stats = {}
        self.action_history = []

    def save_statistics(self, filename: str) -> None:
        """
        Save statistics to a JSON file.

        Args:
            filename: Name of the file to save to
        """
        history = []
        for action, stats in self.action_history:
            history.append({
                "action": str(action),
                "stats": {k: v for k, v in stats.items() if not isinstance(v, (dict, list))}
            })

        data = {
            "agent_name": self.name,
            "config": self.config.to_dict(),
            "history": history,
            "total_actions": len(self.action_history)
        }

        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)

    def __str__(self) -> str:
        return f"{self.name} (MCTS, {self.config.iterations} iterations)"


class MCTSAgentFactory:
    """
    Factory for creating MCTS agents with different configurations.
    """

    @staticmethod
    def create_fast(rng: Optional[random.Random] = None) -> MCTSAgent:
        """
        Create a fast MCTS agent with fewer iterations.

        Returns:
            MCTSAgent
        """
        return MCTSAgent(config=MCTSConfig.fast(), name="Fast MCTS", rng=rng)

    @staticmethod
    def create_standard(rng: Optional[random.Random] = None) -> MCTSAgent:
        """
        Create a standard MCTS agent with balanced parameters.

        Returns:
            MCTSAgent
        """
        return MCTSAgent(config=MCTSConfig.default(), name="Standard MCTS", rng=rng)

    @staticmethod
    def create_strong(rng: Optional[random.Random] = None) -> MCTSAgent:
        """
        Create a strong MCTS agent with more iterations.

        Returns:
            MCTSAgent
        """
        return MCTSAgent(config=MCTSConfig.deep(), name="Strong MCTS", rng=rng)

    @staticmethod
    def create_custom(
        iterations: int = 250,
        rollout_depth: int = 8,
        exploration_weight: float = math.sqrt(2),
        seed: Optional[int] = None,
        name: str = "Custom MCTS",
        rng: Optional[random.Random] = None
    ) -> MCTSAgent:
        """
        Create a custom MCTS agent.

        Args:
            iterations: Number of MCTS iterations
            rollout_depth: Maximum random steps per rollout
            exploration_weight: UCB1 exploration parameter
            seed: Seed for the agent's random source
            name: Name of the agent
            rng: Random source (overrides ``seed`` when given)

        Returns:
            MCTSAgent
        """
        config = MCTSConfig(
            iterations=iterations,
            rollout_depth=rollout_depth,
            exploration_weight=exploration_weight,
            seed=seed
        )
        return MCTSAgent(config=config, name=name, rng=rng)
