import numpy as np

from . import config
from .errors import ConfigurationError
from .population import Population, FITNESS_DTYPE, UNEVALUATED_FITNESS
from .problem_definition_base import calculate_target_fitness


# ===================================================================
#
#           Genetic Operators for the N-Queens GA
#
# This module contains the host-side half of every generation:
# ranking, the convergence check, truncation selection, crossover
# and point mutation. All randomness comes from the numpy Generator
# passed in by the caller.
#
# ===================================================================

def rank_population(population):
    """
    Sorts the population by descending fitness.

    The order among individuals with equal fitness is not specified.

    Args:
        population (Population): An evaluated population.

    Returns:
        Population: A new population, best individual first.
    """
    order = np.argsort(-population.fitness.astype(np.int64), kind="stable")
    return population.reorder(order)


def is_converged(population, board_size):
    """True if the best (first) individual of a ranked population has no collisions."""
    return int(population.fitness[0]) >= calculate_target_fitness(board_size)


def select_parents(population_size, rng):
    """
    Truncation selection: draws two parent indices per child from the top half.

    Parents are drawn independently and uniformly from [0, population_size // 2),
    so both parents of a child may be the same individual.

    Args:
        population_size (int): Number of children to create (and size of the ranked population).
        rng (np.random.Generator): The run's random source.

    Returns:
        tuple[np.ndarray, np.ndarray]: Indices of the first and second parent of each child.
    """
    pool_size = population_size // 2
    if pool_size < 1:
        raise ConfigurationError(f"Population size {population_size} leaves no parents to select")
    first_parents = rng.integers(0, pool_size, size=population_size)
    second_parents = rng.integers(0, pool_size, size=population_size)
    return first_parents, second_parents


def crossover_midpoint(first_parents, second_parents):
    """
    Single fixed-point crossover: rows [0, mid) from the first parent, the rest from the second.

    Args:
        first_parents (np.ndarray): Positions of the first parents (children, board_size).
        second_parents (np.ndarray): Positions of the second parents, same shape.

    Returns:
        np.ndarray: Freshly allocated child positions.
    """
    midpoint = first_parents.shape[1] // 2
    children = np.empty_like(first_parents)
    children[:, :midpoint] = first_parents[:, :midpoint]
    children[:, midpoint:] = second_parents[:, midpoint:]
    return children


def crossover_uniform(first_parents, second_parents, rng):
    """Per-row crossover: every row is copied from a parent chosen by a fair coin flip."""
    from_first = rng.random(first_parents.shape) < 0.5
    return np.where(from_first, first_parents, second_parents)


def crossover(first_parents, second_parents, rng, policy=None):
    """
    Combines parent position matrices into children with the configured policy.

    Args:
        first_parents (np.ndarray): Positions of the first parents.
        second_parents (np.ndarray): Positions of the second parents.
        rng (np.random.Generator): The run's random source (used by "uniform").
        policy (str, optional): "midpoint" or "uniform". Defaults to config.CROSSOVER_POLICY.

    Returns:
        np.ndarray: The child positions.
    """
    policy = policy or config.CROSSOVER_POLICY
    if policy == "midpoint":
        return crossover_midpoint(first_parents, second_parents)
    if policy == "uniform":
        return crossover_uniform(first_parents, second_parents, rng)
    raise ConfigurationError(f"Unknown crossover policy '{policy}'")


def mutate(children, board_size, rng, mutation_rate=None):
    """
    Point mutation, applied in place.

    Each child is mutated with probability ``mutation_rate``; a mutated child
    gets one uniformly chosen row overwritten with a freshly drawn column.
    The new column may equal the old one.

    Args:
        children (np.ndarray): Child positions (children, board_size), modified in place.
        board_size (int): Number of rows/columns on the board.
        rng (np.random.Generator): The run's random source.
        mutation_rate (float, optional): Defaults to config.MUTATION_RATE.

    Returns:
        np.ndarray: Indices of the children that were mutated.
    """
    if mutation_rate is None:
        mutation_rate = config.MUTATION_RATE
    mutated = np.flatnonzero(rng.random(children.shape[0]) < mutation_rate)
    if mutated.size:
        rows = rng.integers(0, board_size, size=mutated.size)
        columns = rng.integers(0, board_size, size=mutated.size)
        children[mutated, rows] = columns
    return mutated


def reproduce(ranked_population, population_size, board_size, rng,
              mutation_rate=None, crossover_policy=None):
    """
    Builds the next generation from a ranked population.

    Why (Purpose and Necessity):
    Selection only looks at the top half of the ranked population, so the
    better boards keep propagating their rows while the worse half is
    discarded. The returned generation wholly replaces the current one;
    parents only survive through their children.

    What (Implementation Details):
    - Two parents per child from indices [0, population_size // 2).
    - Crossover with a single policy for the whole generation.
    - Point mutation with probability ``mutation_rate`` per child.
    - Child fitness reset to the unevaluated sentinel.

    Args:
        ranked_population (Population): Population sorted best-first.
        population_size (int): Number of children to create.
        board_size (int): Number of rows per individual.
        rng (np.random.Generator): The run's random source.
        mutation_rate (float, optional): Defaults to config.MUTATION_RATE.
        crossover_policy (str, optional): Defaults to config.CROSSOVER_POLICY.

    Returns:
        Population: The next generation, unevaluated.
    """
    if ranked_population.board_size != board_size:
        raise ValueError(
            f"Population board size {ranked_population.board_size} does not match {board_size}"
        )
    if ranked_population.size != population_size:
        raise ValueError(
            f"Population holds {ranked_population.size} individuals, expected {population_size}"
        )
    first_parents, second_parents = select_parents(population_size, rng)
    children = crossover(
        ranked_population.positions[first_parents],
        ranked_population.positions[second_parents],
        rng,
        policy=crossover_policy,
    )
    mutate(children, board_size, rng, mutation_rate=mutation_rate)
    fitness = np.full(population_size, UNEVALUATED_FITNESS, dtype=FITNESS_DTYPE)
    return Population(children, fitness)
