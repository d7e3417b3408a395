"""
Tests for ranking, convergence, selection, crossover, mutation and reproduction.
"""

import unittest

import numpy as np

from nqueens_core import ga_operators as operators
from nqueens_core.errors import ConfigurationError
from nqueens_core.individual import Individual
from nqueens_core.population import Population, POSITION_DTYPE
from nqueens_core.problem_definition_base import create_random_population
from nqueens_core.evaluator import evaluate_positions


class TestRanking(unittest.TestCase):

    def test_rank_sorts_descending(self):
        rng = np.random.default_rng(3)
        population = create_random_population(100, 8, rng)
        population.fitness[:] = evaluate_positions(population.positions)

        ranked = operators.rank_population(population)

        self.assertTrue(np.all(ranked.fitness[:-1] >= ranked.fitness[1:]))
        self.assertEqual(sorted(ranked.fitness.tolist()), sorted(population.fitness.tolist()))

    def test_rank_keeps_positions_with_their_fitness(self):
        population = Population.from_individuals([
            Individual(0, [0, 0, 0, 0]),
            Individual(6, [1, 3, 0, 2]),
            Individual(3, [2, 2, 2, 1]),
        ])
        ranked = operators.rank_population(population)
        self.assertEqual(ranked.individual(0), Individual(6, [1, 3, 0, 2]))
        self.assertEqual(ranked.individual(2), Individual(0, [0, 0, 0, 0]))

    def test_is_converged(self):
        solved = Population.from_individuals([Individual(6, [1, 3, 0, 2]), Individual(0, [0, 0, 0, 0])])
        unsolved = Population.from_individuals([Individual(5, [1, 3, 0, 1]), Individual(0, [0, 0, 0, 0])])
        self.assertTrue(operators.is_converged(solved, 4))
        self.assertFalse(operators.is_converged(unsolved, 4))


class TestSelection(unittest.TestCase):

    def test_parents_come_from_top_half(self):
        rng = np.random.default_rng(11)
        first, second = operators.select_parents(101, rng)
        self.assertEqual(len(first), 101)
        self.assertEqual(len(second), 101)
        self.assertTrue(np.all((first >= 0) & (first < 50)))
        self.assertTrue(np.all((second >= 0) & (second < 50)))

    def test_population_of_two_selects_the_best(self):
        rng = np.random.default_rng(0)
        first, second = operators.select_parents(2, rng)
        self.assertTrue(np.all(first == 0))
        self.assertTrue(np.all(second == 0))

    def test_empty_pool_rejected(self):
        with self.assertRaises(ConfigurationError):
            operators.select_parents(1, np.random.default_rng(0))


class TestCrossover(unittest.TestCase):

    def test_midpoint_crossover(self):
        first = np.array([[0, 0, 0, 0]], dtype=POSITION_DTYPE)
        second = np.array([[3, 3, 3, 3]], dtype=POSITION_DTYPE)
        child = operators.crossover_midpoint(first, second)
        np.testing.assert_array_equal(child, [[0, 0, 3, 3]])

    def test_midpoint_crossover_odd_board(self):
        first = np.array([[1, 1, 1, 1, 1]], dtype=POSITION_DTYPE)
        second = np.array([[4, 4, 4, 4, 4]], dtype=POSITION_DTYPE)
        child = operators.crossover_midpoint(first, second)
        np.testing.assert_array_equal(child, [[1, 1, 4, 4, 4]])

    def test_child_is_a_copy(self):
        first = np.array([[0, 0, 0, 0]], dtype=POSITION_DTYPE)
        second = np.array([[3, 3, 3, 3]], dtype=POSITION_DTYPE)
        child = operators.crossover(first, second, np.random.default_rng(0), policy="midpoint")
        child[0, 0] = 2
        self.assertEqual(first[0, 0], 0)

    def test_uniform_crossover_takes_rows_from_parents(self):
        rng = np.random.default_rng(8)
        first = np.zeros((200, 6), dtype=POSITION_DTYPE)
        second = np.full((200, 6), 5, dtype=POSITION_DTYPE)
        children = operators.crossover(first, second, rng, policy="uniform")
        self.assertTrue(np.all((children == 0) | (children == 5)))
        # Both parents contribute across a large batch.
        self.assertTrue(np.any(children == 0))
        self.assertTrue(np.any(children == 5))

    def test_unknown_policy(self):
        first = np.zeros((1, 4), dtype=POSITION_DTYPE)
        with self.assertRaises(ConfigurationError):
            operators.crossover(first, first, np.random.default_rng(0), policy="cycle")


class TestMutation(unittest.TestCase):

    def test_zero_rate_leaves_children_untouched(self):
        rng = np.random.default_rng(1)
        children = rng.integers(0, 8, size=(100, 8)).astype(POSITION_DTYPE)
        original = children.copy()
        mutated = operators.mutate(children, 8, rng, mutation_rate=0.0)
        self.assertEqual(mutated.size, 0)
        np.testing.assert_array_equal(children, original)

    def test_full_rate_changes_at_most_one_row_per_child(self):
        rng = np.random.default_rng(2)
        children = rng.integers(0, 8, size=(100, 8)).astype(POSITION_DTYPE)
        original = children.copy()
        mutated = operators.mutate(children, 8, rng, mutation_rate=1.0)
        self.assertEqual(mutated.size, 100)
        changed_rows = (children != original).sum(axis=1)
        self.assertTrue(np.all(changed_rows <= 1))
        self.assertTrue(np.all(children < 8))


class TestReproduction(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(21)
        population = create_random_population(60, 8, rng)
        population.fitness[:] = evaluate_positions(population.positions)
        self.ranked = operators.rank_population(population)

    def test_population_size_and_bounds(self):
        rng = np.random.default_rng(4)
        children = operators.reproduce(self.ranked, 60, 8, rng)
        self.assertEqual(len(children), 60)
        self.assertEqual(children.board_size, 8)
        self.assertTrue(np.all(children.positions < 8))
        self.assertTrue(np.all(children.fitness == 0))

    def test_children_built_from_top_half_without_mutation(self):
        rng = np.random.default_rng(4)
        children = operators.reproduce(self.ranked, 60, 8, rng, mutation_rate=0.0)
        top_half = self.ranked.positions[:30]
        top_first_halves = {tuple(row[:4]) for row in top_half}
        top_second_halves = {tuple(row[4:]) for row in top_half}
        for child in children.positions:
            self.assertIn(tuple(child[:4]), top_first_halves)
            self.assertIn(tuple(child[4:]), top_second_halves)

    def test_uniform_policy_preserves_size(self):
        rng = np.random.default_rng(4)
        children = operators.reproduce(self.ranked, 60, 8, rng, crossover_policy="uniform")
        self.assertEqual(children.positions.shape, (60, 8))

    def test_parents_not_modified(self):
        before = self.ranked.positions.copy()
        operators.reproduce(self.ranked, 60, 8, np.random.default_rng(4), mutation_rate=1.0)
        np.testing.assert_array_equal(self.ranked.positions, before)

    def test_board_size_mismatch(self):
        with self.assertRaises(ValueError):
            operators.reproduce(self.ranked, 60, 9, np.random.default_rng(0))

    def test_population_size_mismatch(self):
        # Selection would index past the ranked population for a larger size.
        for population_size in (59, 120):
            with self.assertRaises(ValueError):
                operators.reproduce(self.ranked, population_size, 8, np.random.default_rng(0))


if __name__ == "__main__":
    unittest.main()
