#!/usr/bin/env python
"""
Compare dungeon agents over many random dungeons.

Every agent plays the same sequence of generated dungeons, and the script
reports how often each one escapes, its average score and turns taken.

Example usage:
    # Compare all agents on 20 dungeons
    python demo_game.py --episodes 20

    # Only MCTS against the random baseline, with a smaller search
    python demo_game.py --agents mcts random --mcts-iterations 100
"""
import sys
import time
import argparse
import logging
import random
from typing import Any, Dict, List

import numpy as np
from tqdm import tqdm

from dungeon_ai.core.world import DungeonMap, generate_dungeon

from dungeon_ai.mcts.agent import MCTSAgent
from dungeon_ai.mcts.config import MCTSConfig

from dungeon_ai.baselines.agents import RandomAgent, GreedyAgent


def parse_args():
    """Parse command-line arguments for demo configuration."""
    parser = argparse.ArgumentParser(description="Compare dungeon agents on random dungeons")

    parser.add_argument("--agents", type=str, nargs="+", default=["mcts", "greedy", "random"],
                        choices=["mcts", "greedy", "random"],
                        help="Agents to compare")
    parser.add_argument("--episodes", type=int, default=10,
                        help="Number of dungeons each agent plays")

    # MCTS configuration
    parser.add_argument("--mcts-iterations", type=int, default=250,
                        help="Number of MCTS iterations per move")
    parser.add_argument("--rollout-depth", type=int, default=8,
                        help="Maximum random steps per rollout")

    # Dungeon configuration
    parser.add_argument("--width", type=int, default=14,
                        help="Dungeon width")
    parser.add_argument("--height", type=int, default=9,
                        help="Dungeon height")
    parser.add_argument("--max-turns", type=int, default=100,
                        help="Maximum number of turns per episode")
    parser.add_argument("--seed", type=int, default=0,
                        help="Random seed for reproducibility")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")

    return parser.parse_args()


def create_agent(agent_type: str, args, rng: random.Random):
    """Create an agent based on type."""
    if agent_type == "mcts":
        config = MCTSConfig(
            iterations=args.mcts_iterations,
            rollout_depth=args.rollout_depth
        )
        return MCTSAgent(config=config, name="MCTS AI", rng=rng)
    elif agent_type == "greedy":
        return GreedyAgent(name="Greedy AI")
    elif agent_type == "random":
        return RandomAgent(name="Random AI", rng=rng)
    raise ValueError(f"Unknown agent type: {agent_type}")


def run_episode(agent, dungeon: DungeonMap, max_turns: int) -> Dict[str, Any]:
    """
    Play one dungeon with an agent.

    Args:
        agent: Controller with a ``choose_action`` method
        dungeon: Starting state (left untouched)
        max_turns: Turn cap

    Returns:
        Dictionary with the episode outcome
    """
    state = dungeon.clone()
    start_time = time.time()
    while not state.is_terminal() and state.turn < max_turns:
        state.apply(agent.choose_action(state))

    return {
        "escaped": state.escaped,
        "died": not state.hero_alive(),
        "score": state.score(),
        "turns": state.turn,
        "time": time.time() - start_time,
    }


def run_demo(args) -> Dict[str, List[Dict[str, Any]]]:
    """Play every dungeon with every agent."""
    dungeon_rng = random.Random(args.seed)
    dungeons = [
        generate_dungeon(args.width, args.height, rng=dungeon_rng)
        for _ in range(args.episodes)
    ]

    results: Dict[str, List[Dict[str, Any]]] = {}
    for agent_type in args.agents:
        agent = create_agent(agent_type, args, random.Random(args.seed))
        episodes = []
        for dungeon in tqdm(dungeons, desc=agent.name):
            episodes.append(run_episode(agent, dungeon, args.max_turns))
        results[agent.name] = episodes
    return results


def display_results(results: Dict[str, List[Dict[str, Any]]]) -> None:
    """Print one summary line per agent."""
    print("\n" + "=" * 72)
    print(f"{'Agent':<14}{'Escaped':>10}{'Died':>8}{'Score':>10}{'Turns':>10}{'s/episode':>12}")
    print("=" * 72)
    for name, episodes in results.items():
        escaped = np.mean([e["escaped"] for e in episodes])
        died = np.mean([e["died"] for e in episodes])
        score = np.mean([e["score"] for e in episodes])
        turns = np.mean([e["turns"] for e in episodes])
        seconds = np.mean([e["time"] for e in episodes])
        print(f"{name:<14}{escaped:>10.0%}{died:>8.0%}{score:>10.1f}{turns:>10.1f}{seconds:>12.2f}")


def main():
    """Main function."""
    args = parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")

    try:
        results = run_demo(args)
    except KeyboardInterrupt:
        print("\nDemo interrupted by user.")
        sys.exit(0)

    display_results(results)


if __name__ == "__main__":
    main()
