"""
Configuration for Monte Carlo Tree Search (MCTS).

This module defines the configuration parameters for the dungeon planner:
the search budget, the UCB1 exploration constant, the rollout depth and the
weights of the state evaluation heuristic.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional
import math


@dataclass
class MCTSConfig:
    """
    Configuration parameters for Monte Carlo Tree Search.

    This class defines all tunable parameters for the planner,
    with validation and sensible defaults.
    """
    # Search parameters
    iterations: int = 250
    """Number of MCTS iterations to perform per move decision"""

    rollout_depth: int = 8
    """Maximum number of random steps in a rollout"""

    exploration_weight: float = math.sqrt(2)
    """UCB1 exploration parameter (default is sqrt(2))"""

    # Evaluation weights
    death_penalty: float = -1000.0
    """Score of a state whose hero is absent or dead"""

    terminal_bonus: float = 500.0
    """Bonus for a halted state with a living hero (exit reached)"""

    score_weight: float = 10.0
    """Multiplier applied to the hero's in-game score"""

    hitpoint_weight: float = 0.5
    """Multiplier applied to the hero's remaining hit points"""

    # Randomness
    seed: Optional[int] = None
    """Seed for the planner's random source when none is injected"""

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.iterations <= 0:
            raise ValueError("iterations must be positive")

        if self.rollout_depth < 0:
            raise ValueError("rollout_depth must be non-negative")

        if self.exploration_weight < 0:
            raise ValueError("exploration_weight must be non-negative")

        if self.death_penalty >= self.terminal_bonus:
            raise ValueError("death_penalty must be lower than terminal_bonus")

    @classmethod
    def default(cls) -> 'MCTSConfig':
        """
        Get the default configuration.

        Returns:
            Default MCTSConfig object
        """
        return cls()

    @classmethod
    def fast(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for speed (fewer iterations).

        Returns:
            Fast MCTSConfig object
        """
        return cls(iterations=60, rollout_depth=5)

    @classmethod
    def deep(cls) -> 'MCTSConfig':
        """
        Get a configuration optimized for deep search.

        Returns:
            Deep MCTSConfig object
        """
        return cls(
            iterations=1000,
            rollout_depth=16,
            exploration_weight=1.2  # Slightly less exploration
        )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MCTSConfig':
        """
        Create a configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters

        Returns:
            MCTSConfig object
        """
        # Filter out any keys that aren't valid parameters
        valid_params = {k: v for k, v in config_dict.items()
                        if k in cls.__dataclass_fields__}
        return cls(**valid_params)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary of configuration parameters
        """
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def __str__(self) -> str:
        params = ", ".join(f"{name}={value}" for name, value in self.to_dict().items())
        return f"MCTSConfig({params})"
