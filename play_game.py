#!/usr/bin/env python
"""
Play one dungeon episode with a chosen controller.

This script renders the dungeon every turn and lets an AI agent (or you)
steer the hero towards an exit.

Example usage:
    # Watch the MCTS agent on a random dungeon
    python play_game.py --agent mcts --mcts-iterations 250

    # Steer the hero yourself (w/a/s/d, enter to wait)
    python play_game.py --agent human

    # Watch the greedy baseline on a layout file
    python play_game.py --agent greedy --layout dungeons/corridor.txt
"""
import os
import sys
import time
import argparse
import logging
import random

from dungeon_ai.core.actions import Action, get_valid_moves
from dungeon_ai.core.constants import (
    WALL_CHAR, EXIT_CHAR, HERO_CHAR, MONSTER_CHAR, POTION_CHAR, TREASURE_CHAR
)
from dungeon_ai.core.world import DungeonMap, create_dungeon, generate_dungeon

from dungeon_ai.mcts.agent import MCTSAgent
from dungeon_ai.mcts.config import MCTSConfig

from dungeon_ai.baselines.agents import RandomAgent, GreedyAgent


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    BLACK = "\033[90m"
    YELLOW = "\033[93m"
    MAGENTA = "\033[95m"

    @staticmethod
    def for_symbol(symbol: str) -> str:
        """Get ANSI color code for a map symbol."""
        if symbol == HERO_CHAR:
            return Colors.BOLD + Colors.CYAN
        elif symbol == MONSTER_CHAR:
            return Colors.RED
        elif symbol == EXIT_CHAR:
            return Colors.BOLD + Colors.GREEN
        elif symbol == POTION_CHAR:
            return Colors.MAGENTA
        elif symbol == TREASURE_CHAR:
            return Colors.YELLOW
        elif symbol == WALL_CHAR:
            return Colors.BLACK
        else:
            return Colors.RESET


KEY_ACTIONS = {
    "w": Action.UP,
    "d": Action.RIGHT,
    "s": Action.DOWN,
    "a": Action.LEFT,
    "": Action.IDLE,
}


def parse_args():
    """Parse command-line arguments for game configuration."""
    parser = argparse.ArgumentParser(description="Play a dungeon episode")

    parser.add_argument("--agent", type=str, default="mcts",
                        choices=["mcts", "random", "greedy", "human"],
                        help="Controller for the hero")

    # MCTS configuration
    parser.add_argument("--mcts-iterations", type=int, default=250,
                        help="Number of MCTS iterations per move")
    parser.add_argument("--rollout-depth", type=int, default=8,
                        help="Maximum random steps per rollout")

    # Dungeon configuration
    parser.add_argument("--layout", type=str, default=None,
                        help="Path to an ASCII layout file (random dungeon if omitted)")
    parser.add_argument("--width", type=int, default=14,
                        help="Width of a generated dungeon")
    parser.add_argument("--height", type=int, default=9,
                        help="Height of a generated dungeon")

    # Game configuration
    parser.add_argument("--max-turns", type=int, default=100,
                        help="Maximum number of turns before ending the episode")
    parser.add_argument("--delay", type=float, default=0.2,
                        help="Delay between turns (seconds)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducibility")
    parser.add_argument("--verbose", action="store_true",
                        help="Show search details for each move")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")

    return parser.parse_args()


def create_agent(args, rng: random.Random):
    """Create the hero controller, or None for a human player."""
    if args.agent == "mcts":
        config = MCTSConfig(
            iterations=args.mcts_iterations,
            rollout_depth=args.rollout_depth,
            seed=args.seed
        )
        return MCTSAgent(config=config, name="MCTS AI", verbose=args.verbose, rng=rng)
    elif args.agent == "random":
        return RandomAgent(name="Random AI", rng=rng)
    elif args.agent == "greedy":
        return GreedyAgent(name="Greedy AI")
    return None


def load_dungeon(args, rng: random.Random) -> DungeonMap:
    """Load the layout file or generate a random dungeon."""
    if args.layout:
        with open(args.layout, 'r') as f:
            return create_dungeon(f.read())
    return generate_dungeon(args.width, args.height, rng=rng)


def display_dungeon(state: DungeonMap) -> None:
    """Print the map with colored symbols and the hero's status line."""
    print()
    for line in state.render().splitlines():
        print("".join(Colors.for_symbol(ch) + ch + Colors.RESET for ch in line))
    print(f"\nTurn {state.turn} | HP {state.hitpoints()} | Score {state.score()} | "
          f"Monsters {len(state.monsters)}")


def get_human_action(state: DungeonMap) -> Action:
    """Read a move from the keyboard."""
    legal = get_valid_moves(state)
    while True:
        choice = input("Move (w/a/s/d, enter to wait, q to quit): ").strip().lower()
        if choice == "q":
            raise KeyboardInterrupt
        action = KEY_ACTIONS.get(choice)
        if action is None:
            print("Unknown key.")
        elif action.is_move() and action not in legal:
            print("There is a wall there.")
        else:
            return action


def play_game(args) -> DungeonMap:
    """Run one episode and return the final state."""
    rng = random.Random(args.seed)
    state = load_dungeon(args, rng)
    agent = create_agent(args, rng)

    display_dungeon(state)
    while not state.is_terminal() and state.turn < args.max_turns:
        if agent is None:
            action = get_human_action(state)
        else:
            action = agent.choose_action(state)
            time.sleep(args.delay)

        state.apply(action)
        print(f"\nHero: {action}")
        display_dungeon(state)

    if state.escaped:
        print(Colors.BOLD + Colors.GREEN + "\nThe hero escaped!" + Colors.RESET)
    elif not state.hero_alive():
        print(Colors.BOLD + Colors.RED + "\nThe hero died." + Colors.RESET)
    else:
        print(Colors.YELLOW + f"\nOut of time after {state.turn} turns." + Colors.RESET)
    print(f"Final score: {state.score()}")
    return state


def main():
    """Main function."""
    args = parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s: %(message)s")

    # Set up colored output for Windows
    if os.name == 'nt':
        os.system('color')

    print(Colors.BOLD + Colors.YELLOW + "Welcome to Dungeon AI!" + Colors.RESET)

    try:
        play_game(args)
    except KeyboardInterrupt:
        print("\nGame interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
