"""
Baseline agents that pick moves without search.
"""

from dungeon_ai.baselines.agents import Agent, RandomAgent, GreedyAgent

__all__ = ['Agent', 'RandomAgent', 'GreedyAgent']
