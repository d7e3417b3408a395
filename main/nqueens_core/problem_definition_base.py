import numpy as np

from . import config
from .budget import GenerationBudget
from .errors import ConfigurationError
from .population import Population, POSITION_DTYPE, FITNESS_DTYPE, UNEVALUATED_FITNESS


# ===================================================================
#
#           Problem Definition for N-Queens (Base)
#
# This module contains the shared, backend-independent logic of the
# problem: the fitness ceiling, configuration validation and the
# random initial population. The fitness kernels themselves live in
# problem_definition.py (host) and problem_definition_gpu.py (CUDA).
#
# ===================================================================

MIN_BOARD_SIZE = 2
MIN_POPULATION_SIZE = 2
# Columns are stored as uint16, so the board cannot be wider than this.
MAX_BOARD_SIZE = int(np.iinfo(POSITION_DTYPE).max) + 1


def calculate_target_fitness(board_size):
    """
    Returns the fitness of a board with no attacking queens.

    Every unordered pair of rows holds one pair of queens, so the ceiling is
    C(n, 2) = n * (n - 1) / 2.

    Args:
        board_size (int): The number of rows on the board.

    Returns:
        int: The maximum reachable fitness.
    """
    return board_size * (board_size - 1) // 2


def validate_configuration(board_size, population_size, budget=None,
                           mutation_rate=None, crossover_policy=None):
    """
    Rejects unusable run parameters before any device resource is allocated.

    Why (Purpose and Necessity):
    A board with fewer than two rows has no queen pairs to score, and a
    population of fewer than two individuals leaves an empty "top half" to
    select parents from. Catching these up front keeps the failure out of the
    kernel and the reproduction step, where it would surface as an obscure
    indexing error.

    What (Implementation Details):
    Checks types and ranges of every parameter that is passed in; parameters
    left as None are not checked.

    Args:
        board_size (int): The number of rows/columns on the board.
        population_size (int): The number of individuals per generation.
        budget (GenerationBudget, optional): The generation budget.
        mutation_rate (float, optional): Per-child mutation probability.
        crossover_policy (str, optional): Name of the crossover policy.

    Raises:
        ConfigurationError: If any parameter is invalid.
    """
    if isinstance(board_size, bool) or not isinstance(board_size, (int, np.integer)):
        raise ConfigurationError(f"Board size must be an integer, got {board_size!r}")
    if board_size < MIN_BOARD_SIZE:
        raise ConfigurationError(f"Board size must be at least {MIN_BOARD_SIZE}, got {board_size}")
    if board_size > MAX_BOARD_SIZE:
        raise ConfigurationError(f"Board size must be at most {MAX_BOARD_SIZE}, got {board_size}")

    if isinstance(population_size, bool) or not isinstance(population_size, (int, np.integer)):
        raise ConfigurationError(f"Population size must be an integer, got {population_size!r}")
    if population_size < MIN_POPULATION_SIZE:
        raise ConfigurationError(
            f"Population size must be at least {MIN_POPULATION_SIZE}, got {population_size}"
        )

    if budget is not None and not isinstance(budget, GenerationBudget):
        raise ConfigurationError(f"Expected a GenerationBudget, got {budget!r}")

    if mutation_rate is not None and not 0.0 <= mutation_rate <= 1.0:
        raise ConfigurationError(f"Mutation rate must be within [0, 1], got {mutation_rate}")

    if crossover_policy is not None and crossover_policy not in config.CROSSOVER_POLICIES:
        raise ConfigurationError(
            f"Unknown crossover policy '{crossover_policy}', "
            f"expected one of {', '.join(config.CROSSOVER_POLICIES)}"
        )


def create_random_population(population_size, board_size, rng):
    """
    Creates the initial population with every queen in a uniformly random column.

    Each row of each individual is drawn independently from [0, board_size),
    so every position is valid by construction. Fitness starts at the
    unevaluated sentinel.

    Args:
        population_size (int): The number of individuals to create.
        board_size (int): The number of rows per individual.
        rng (np.random.Generator): The run's random source.

    Returns:
        Population: The freshly initialized host population.
    """
    validate_configuration(board_size, population_size)
    positions = rng.integers(0, board_size, size=(population_size, board_size), dtype=POSITION_DTYPE)
    fitness = np.full(population_size, UNEVALUATED_FITNESS, dtype=FITNESS_DTYPE)
    return Population(positions, fitness)
