#!/usr/bin/env python
"""
Tests for the MCTS planner.

Covers the configuration, tree nodes and UCB1 selection, the evaluation
heuristic, the full search loop on small hand-made dungeons, and the agents
built on top of it.
"""
import json
import math
import os
import random
import tempfile
import unittest

from dungeon_ai.core.actions import Action, Point, get_valid_moves
from dungeon_ai.core.world import create_dungeon, generate_dungeon

from dungeon_ai.mcts.config import MCTSConfig
from dungeon_ai.mcts.node import MCTSNode
from dungeon_ai.mcts.evaluation import evaluate, get_target_exit
from dungeon_ai.mcts.search import (
    mcts_search, build_search_tree, choose_action, select_node, expand_node,
    simulate_rollout, backpropagate, count_nodes, get_action_statistics
)
from dungeon_ai.mcts.agent import MCTSAgent, MCTSAgentFactory

from dungeon_ai.baselines.agents import RandomAgent, GreedyAgent


# Hero next to the exit with two other ways to go
NEXT_TO_EXIT = ["#####", "#.HE#", "#...#", "#####"]

# Hero in a dead end with a single way out and no exit at all
DEAD_END = ["#####", "#H..#", "#####"]

# Hero walled in on every side
BOXED_IN = ["###", "#H#", "###"]


class TestMCTSConfig(unittest.TestCase):
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = MCTSConfig()
        self.assertEqual(config.iterations, 250)
        self.assertEqual(config.rollout_depth, 8)
        self.assertAlmostEqual(config.exploration_weight, math.sqrt(2))
        self.assertEqual(config.death_penalty, -1000.0)
        self.assertEqual(config.terminal_bonus, 500.0)
        self.assertEqual(config.score_weight, 10.0)
        self.assertEqual(config.hitpoint_weight, 0.5)
        self.assertIsNone(config.seed)

    def test_validation(self):
        with self.assertRaises(ValueError):
            MCTSConfig(iterations=0)
        with self.assertRaises(ValueError):
            MCTSConfig(rollout_depth=-1)
        with self.assertRaises(ValueError):
            MCTSConfig(exploration_weight=-0.5)
        with self.assertRaises(ValueError):
            MCTSConfig(death_penalty=600.0)

    def test_presets(self):
        self.assertLess(MCTSConfig.fast().iterations, MCTSConfig.default().iterations)
        self.assertGreater(MCTSConfig.deep().iterations, MCTSConfig.default().iterations)
        self.assertGreater(MCTSConfig.deep().rollout_depth, MCTSConfig.default().rollout_depth)

    def test_from_dict_ignores_unknown_keys(self):
        config = MCTSConfig.from_dict({"iterations": 40, "rollout_depth": 3, "colour": "red"})
        self.assertEqual(config.iterations, 40)
        self.assertEqual(config.rollout_depth, 3)
        self.assertNotIn("colour", config.to_dict())
        self.assertIn("iterations=40", str(config))


class TestMCTSNode(unittest.TestCase):
    """Test tree node bookkeeping and UCB1 selection."""

    def test_untried_actions_are_legal_moves(self):
        state = create_dungeon(NEXT_TO_EXIT)
        node = MCTSNode(state)
        self.assertEqual(set(node.untried_actions), {Action.RIGHT, Action.DOWN, Action.LEFT})
        self.assertIsNone(node.parent)
        self.assertEqual(node.action, Action.IDLE)
        self.assertEqual(node.visits, 0)
        self.assertEqual(node.total_value, 0.0)
        self.assertFalse(node.is_fully_expanded())
        self.assertFalse(node.is_terminal())

    def test_take_untried_action_drains_then_idles(self):
        node = MCTSNode(create_dungeon(NEXT_TO_EXIT))
        rng = random.Random(0)
        drawn = [node.take_untried_action(rng) for _ in range(3)]
        self.assertEqual(set(drawn), {Action.RIGHT, Action.DOWN, Action.LEFT})
        self.assertTrue(node.is_fully_expanded())
        self.assertEqual(node.take_untried_action(rng), Action.IDLE)

    def test_terminal_nodes(self):
        state = create_dungeon(["####", "#HE#", "####"])
        state.apply(Action.RIGHT)
        self.assertTrue(MCTSNode(state).is_terminal())

        dead = create_dungeon(DEAD_END)
        dead.hero.alive = False
        self.assertTrue(MCTSNode(dead).is_terminal())

        no_hero = create_dungeon(["####", "#.E#", "####"])
        node = MCTSNode(no_hero)
        self.assertTrue(node.is_terminal())
        self.assertEqual(node.untried_actions, [])

    def test_best_child_without_children(self):
        node = MCTSNode(create_dungeon(BOXED_IN))
        self.assertIsNone(node.best_child(1.0))

    def test_unvisited_child_is_selected_first(self):
        state = create_dungeon(NEXT_TO_EXIT)
        root = MCTSNode(state)
        strong = root.add_child(state.clone(), Action.RIGHT)
        fresh = root.add_child(state.clone(), Action.DOWN)
        strong.visits, strong.total_value = 10, 5000.0
        root.visits = 10

        self.assertIs(root.best_child(math.sqrt(2)), fresh)
        self.assertIs(root.best_child(0.0), fresh)
        self.assertEqual(root.ucb_score(fresh, math.sqrt(2)), float('inf'))

    def test_ucb1_formula(self):
        state = create_dungeon(NEXT_TO_EXIT)
        root = MCTSNode(state)
        a = root.add_child(state.clone(), Action.RIGHT)
        b = root.add_child(state.clone(), Action.DOWN)
        a.visits, a.total_value = 3, 30.0
        b.visits, b.total_value = 1, 9.5
        root.visits = 4

        expected_a = 10.0 + 2.0 * math.sqrt(math.log(5) / 3)
        expected_b = 9.5 + 2.0 * math.sqrt(math.log(5) / 1)
        self.assertAlmostEqual(root.ucb_score(a, 2.0), expected_a)
        self.assertAlmostEqual(root.ucb_score(b, 2.0), expected_b)

        # Exploration favours the rarely visited child, exploitation the better mean
        self.assertIs(root.best_child(2.0), b)
        self.assertIs(root.best_child(0.0), a)

    def test_best_child_keeps_first_on_ties(self):
        state = create_dungeon(NEXT_TO_EXIT)
        root = MCTSNode(state)
        first = root.add_child(state.clone(), Action.RIGHT)
        second = root.add_child(state.clone(), Action.LEFT)
        for child in (first, second):
            child.visits, child.total_value = 2, 10.0
        root.visits = 4
        self.assertIs(root.best_child(0.0), first)


class TestEvaluation(unittest.TestCase):
    """Test the rollout evaluation heuristic."""

    def test_dead_or_missing_hero(self):
        state = create_dungeon(DEAD_END)
        state.hero.alive = False
        self.assertEqual(evaluate(state), -1000.0)

        no_hero = create_dungeon(["####", "#.E#", "####"])
        self.assertEqual(evaluate(no_hero), -1000.0)

    def test_reached_exit(self):
        state = create_dungeon(["####", "#HE#", "####"])
        state.apply(Action.RIGHT)
        # 500 bonus, distance 0, 40 hp at half weight
        self.assertEqual(evaluate(state), 520.0)

    def test_distance_score_and_hitpoints(self):
        state = create_dungeon(["#####", "#H.E#", "#####"])
        self.assertEqual(evaluate(state), -2.0 + 20.0)

        state.hero.score = 3
        state.hero.hitpoints = 10
        self.assertEqual(evaluate(state), -2.0 + 30.0 + 5.0)

    def test_unreachable_exit_uses_map_size(self):
        state = create_dungeon(["#####", "#H#E#", "#####"])
        self.assertEqual(evaluate(state), -(5 + 3) + 20.0)

    def test_no_exit_uses_map_size(self):
        state = create_dungeon(DEAD_END)
        self.assertIsNone(get_target_exit(state))
        self.assertEqual(evaluate(state), -(5 + 3) + 20.0)

    def test_second_exit_is_the_target(self):
        state = create_dungeon(["########", "#EH...E#", "########"])
        self.assertEqual(get_target_exit(state), Point(6, 1))
        self.assertEqual(evaluate(state), -4.0 + 20.0)

        three = create_dungeon(["#########", "#EH..E.E#", "#########"])
        self.assertEqual(get_target_exit(three), Point(5, 1))

        single = create_dungeon(["#####", "#H.E#", "#####"])
        self.assertEqual(get_target_exit(single), Point(3, 1))

    def test_custom_weights(self):
        config = MCTSConfig(terminal_bonus=100.0, score_weight=1.0, hitpoint_weight=0.0)
        state = create_dungeon(["####", "#HE#", "####"])
        state.hero.score = 7
        state.apply(Action.RIGHT)
        self.assertEqual(evaluate(state, config), 107.0)

    def test_evaluation_is_pure(self):
        state = generate_dungeon(10, 7, rng=random.Random(5))
        before = state.render()
        first = evaluate(state)
        self.assertEqual(evaluate(state.clone()), first)
        self.assertEqual(evaluate(state), first)
        self.assertEqual(state.render(), before)


class TestSearchPhases(unittest.TestCase):
    """Test the individual MCTS phases."""

    def test_expand_attaches_child_with_stepped_state(self):
        state = create_dungeon(DEAD_END)
        root = MCTSNode(state.clone())
        child = expand_node(root, random.Random(0))

        self.assertIsNot(child, root)
        self.assertIs(child.parent, root)
        self.assertEqual(root.children, [child])
        self.assertEqual(child.action, Action.RIGHT)
        self.assertEqual(child.state.hero_position(), Point(2, 1))
        self.assertEqual(root.state.hero_position(), Point(1, 1))
        self.assertTrue(root.is_fully_expanded())

    def test_expand_with_nothing_left_returns_node(self):
        root = MCTSNode(create_dungeon(BOXED_IN))
        self.assertIs(expand_node(root, random.Random(0)), root)
        self.assertEqual(root.children, [])

    def test_select_stops_at_unexpanded_node(self):
        state = create_dungeon(NEXT_TO_EXIT)
        root = MCTSNode(state)
        self.assertIs(select_node(root, 1.0), root)

    def test_select_stops_at_childless_expanded_node(self):
        root = MCTSNode(create_dungeon(BOXED_IN))
        self.assertIs(select_node(root, 1.0), root)

    def test_rollout_does_not_touch_state(self):
        state = create_dungeon(NEXT_TO_EXIT)
        value, steps = simulate_rollout(state, MCTSConfig(rollout_depth=5), random.Random(1))
        self.assertEqual(state.hero_position(), Point(2, 1))
        self.assertEqual(state.turn, 0)
        self.assertLessEqual(steps, 5)
        self.assertIsInstance(value, float)

    def test_rollout_stops_early(self):
        config = MCTSConfig(rollout_depth=8)
        boxed = create_dungeon(BOXED_IN)
        self.assertEqual(simulate_rollout(boxed, config, random.Random(0))[1], 0)

        escaped = create_dungeon(["####", "#HE#", "####"])
        escaped.apply(Action.RIGHT)
        value, steps = simulate_rollout(escaped, config, random.Random(0))
        self.assertEqual(steps, 0)
        self.assertEqual(value, 520.0)

    def test_rollout_depth_zero_evaluates_in_place(self):
        state = create_dungeon(["#####", "#H.E#", "#####"])
        value, steps = simulate_rollout(state, MCTSConfig(rollout_depth=0), random.Random(0))
        self.assertEqual(steps, 0)
        self.assertEqual(value, evaluate(state))

    def test_backpropagate_reaches_root(self):
        state = create_dungeon(DEAD_END)
        root = MCTSNode(state.clone())
        child = expand_node(root, random.Random(0))
        grandchild = expand_node(child, random.Random(0))

        backpropagate(grandchild, 12.5)
        for node in (root, child, grandchild):
            self.assertEqual(node.visits, 1)
            self.assertEqual(node.total_value, 12.5)
        self.assertEqual(count_nodes(root), 3)

        stats = get_action_statistics(root)
        self.assertEqual(stats[str(child.action)]["visits"], 1)
        self.assertEqual(stats[str(child.action)]["mean_value"], 12.5)


class TestMCTSSearch(unittest.TestCase):
    """Test full searches on small dungeons."""

    def test_moves_onto_adjacent_exit(self):
        state = create_dungeon(NEXT_TO_EXIT)
        config = MCTSConfig(iterations=30, rollout_depth=1)
        action, stats = mcts_search(state, config, random.Random(0))
        self.assertEqual(action, Action.RIGHT)
        self.assertEqual(stats["action_values"]["RIGHT"], 520.0)
        for other in ("DOWN", "LEFT"):
            self.assertLess(stats["action_values"][other], 520.0)

    def test_single_move_onto_exit(self):
        state = create_dungeon(["####", "#HE#", "####"])
        action = choose_action(state, MCTSConfig(iterations=1, rollout_depth=1), random.Random(0))
        self.assertEqual(action, Action.RIGHT)

    def test_dead_end_still_moves(self):
        state = create_dungeon(DEAD_END)
        action, stats = mcts_search(state, MCTSConfig(iterations=20), random.Random(0))
        self.assertEqual(action, Action.RIGHT)
        self.assertFalse(stats["used_fallback"])

    def test_boxed_in_returns_idle(self):
        state = create_dungeon(BOXED_IN)
        config = MCTSConfig(iterations=15)
        action, stats = mcts_search(state, config, random.Random(0))
        self.assertEqual(action, Action.IDLE)
        self.assertTrue(stats["used_fallback"])
        self.assertEqual(stats["iterations"], 15)
        self.assertEqual(stats["root_visits"], 15)
        self.assertEqual(stats["node_count"], 1)

    def test_root_visits_equal_iterations(self):
        state = generate_dungeon(10, 7, rng=random.Random(2))
        config = MCTSConfig(iterations=120)
        _, stats = mcts_search(state, config, random.Random(2))
        self.assertEqual(stats["iterations"], 120)
        self.assertEqual(stats["root_visits"], 120)
        # The root always has a move here, so every visit went through a child
        self.assertEqual(sum(stats["action_visits"].values()), 120)
        self.assertLessEqual(stats["node_count"], 121)

    def test_visits_add_up_at_every_node(self):
        for seed in range(5):
            state = generate_dungeon(10, 7, rng=random.Random(seed))
            config = MCTSConfig(iterations=200)
            stats = {}
            root = build_search_tree(state, config, random.Random(seed), stats)

            self.assertEqual(stats["iterations"], 200)
            self.assertEqual(root.visits, 200)
            self.assertEqual(sum(c.visits for c in root.children), root.visits)

            pending = [root]
            while pending:
                node = pending.pop()
                self.assertGreaterEqual(node.visits, sum(c.visits for c in node.children))
                for child in node.children:
                    self.assertIs(child.parent, node)
                    self.assertGreaterEqual(child.visits, 1)
                pending.extend(node.children)

    def test_live_state_is_not_modified(self):
        state = generate_dungeon(10, 7, rng=random.Random(4))
        before = (state.render(), state.turn, state.hitpoints(), state.score())
        mcts_search(state, MCTSConfig(iterations=50), random.Random(4))
        self.assertEqual((state.render(), state.turn, state.hitpoints(), state.score()), before)

    def test_short_circuit_without_living_hero(self):
        no_hero = create_dungeon(["####", "#.E#", "####"])
        dead = create_dungeon(DEAD_END)
        dead.hero.alive = False
        halted = create_dungeon(["####", "#HE#", "####"])
        halted.apply(Action.RIGHT)

        for state in (no_hero, dead, halted):
            action, stats = mcts_search(state, MCTSConfig(iterations=10), random.Random(0))
            self.assertEqual(action, Action.IDLE)
            self.assertEqual(stats["iterations"], 0)
            self.assertTrue(stats["short_circuit"])

    def test_seeded_search_is_reproducible(self):
        state = generate_dungeon(10, 7, rng=random.Random(9))
        config = MCTSConfig(iterations=80)
        first_action, first = mcts_search(state, config, random.Random(123))
        second_action, second = mcts_search(state, config, random.Random(123))
        self.assertEqual(first_action, second_action)
        self.assertEqual(first["action_visits"], second["action_visits"])
        self.assertEqual(first["action_values"], second["action_values"])

    def test_config_seed_is_used_without_rng(self):
        state = generate_dungeon(10, 7, rng=random.Random(9))
        config = MCTSConfig(iterations=60, seed=5)
        _, first = mcts_search(state, config)
        _, second = mcts_search(state, config)
        self.assertEqual(first["action_visits"], second["action_visits"])

    def test_always_returns_a_defined_action(self):
        rng = random.Random(31)
        for _ in range(5):
            state = generate_dungeon(9, 7, rng=rng)
            action = choose_action(state, MCTSConfig(iterations=40), rng)
            self.assertIn(action, list(Action))
            self.assertIn(action, get_valid_moves(state))


class TestAgents(unittest.TestCase):
    """Test the MCTS agent and the baselines."""

    def test_mcts_agent_records_statistics(self):
        agent = MCTSAgent(config=MCTSConfig(iterations=30, rollout_depth=1), rng=random.Random(0))
        state = create_dungeon(NEXT_TO_EXIT)

        self.assertEqual(agent.choose_action(state), Action.RIGHT)
        stats = agent.get_last_statistics()
        self.assertEqual(stats["iterations"], 30)
        self.assertIn("total_time", stats)
        self.assertEqual(len(agent.action_history), 1)
        self.assertEqual(agent.get_principal_variation()[0][0], "RIGHT")
        self.assertIn("RIGHT", agent.get_action_statistics())

        agent.reset_statistics()
        self.assertEqual(agent.get_last_statistics(), {})
        self.assertEqual(agent.action_history, [])

    def test_mcts_agent_boxed_in(self):
        agent = MCTSAgent(config=MCTSConfig(iterations=5), rng=random.Random(0))
        self.assertEqual(agent.select_action(create_dungeon(BOXED_IN)), Action.IDLE)

    def test_save_statistics(self):
        agent = MCTSAgent(config=MCTSConfig(iterations=10), name="Saver", rng=random.Random(0))
        agent.choose_action(create_dungeon(DEAD_END))

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "stats.json")
            agent.save_statistics(path)
            with open(path) as f:
                data = json.load(f)

        self.assertEqual(data["agent_name"], "Saver")
        self.assertEqual(data["total_actions"], 1)
        self.assertEqual(data["history"][0]["action"], "RIGHT")
        self.assertEqual(data["config"]["iterations"], 10)

    def test_factory(self):
        self.assertEqual(MCTSAgentFactory.create_fast().config.iterations, MCTSConfig.fast().iterations)
        self.assertEqual(MCTSAgentFactory.create_standard().config.iterations, 250)
        self.assertEqual(MCTSAgentFactory.create_strong().config.iterations, MCTSConfig.deep().iterations)
        custom = MCTSAgentFactory.create_custom(iterations=12, rollout_depth=2, seed=1, name="Mine")
        self.assertEqual(custom.config.iterations, 12)
        self.assertEqual(custom.config.rollout_depth, 2)
        self.assertEqual(str(custom), "Mine (MCTS, 12 iterations)")

    def test_factory_custom_defaults_and_rng(self):
        custom = MCTSAgentFactory.create_custom()
        self.assertEqual(custom.config.to_dict(), MCTSConfig().to_dict())

        rng = random.Random(3)
        seeded = MCTSAgentFactory.create_custom(iterations=12, rng=rng)
        self.assertIs(seeded.rng, rng)
        self.assertIs(MCTSAgentFactory.create_fast(rng=rng).rng, rng)

    def test_random_agent(self):
        agent = RandomAgent(rng=random.Random(0))
        state = create_dungeon(NEXT_TO_EXIT)
        for _ in range(10):
            self.assertIn(agent.choose_action(state), get_valid_moves(state))
        self.assertEqual(agent.choose_action(create_dungeon(BOXED_IN)), Action.IDLE)

    def test_greedy_agent(self):
        agent = GreedyAgent()
        self.assertEqual(agent.choose_action(create_dungeon(NEXT_TO_EXIT)), Action.RIGHT)
        self.assertEqual(agent.choose_action(create_dungeon(["#####", "#E.H#", "#####"])), Action.LEFT)
        self.assertEqual(agent.choose_action(create_dungeon(DEAD_END)), Action.RIGHT)
        self.assertEqual(agent.choose_action(create_dungeon(BOXED_IN)), Action.IDLE)


if __name__ == "__main__":
    unittest.main()
