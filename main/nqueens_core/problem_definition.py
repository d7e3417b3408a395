import numpy as np

from . import config_gpu
from .population import FITNESS_DTYPE


# ===================================================================
#
#           Fitness Kernel for N-Queens (Host Version)
#
# NumPy rendition of the CUDA kernel in problem_definition_gpu.py.
# Each individual is one logical worker: it reads only its own row of
# the position matrix and writes only its own fitness slot, so the
# individuals can be scored in any batch order.
#
# ===================================================================

def _batch_size_for(board_size):
    by_memory = config_gpu.HOST_EVALUATION_ELEMENT_BUDGET // max(1, board_size)
    return max(1, min(config_gpu.HOST_EVALUATION_BATCH_SIZE, by_memory))


def count_collisions(boards):
    """
    Counts attacking queen pairs for a batch of boards.

    Pairs are visited by row distance: for distance d, row r is compared with
    row r + d for every r at once. Every unordered pair (r1, r2) with r1 < r2
    is visited exactly once, and scratch memory stays at one
    (boards x board_size) slice regardless of how many pairs the board has.

    Args:
        boards (np.ndarray): Signed integer matrix (batch, board_size).

    Returns:
        np.ndarray: Number of collisions of every board.
    """
    board_size = boards.shape[1]
    collisions = np.zeros(boards.shape[0], dtype=np.int64)
    for distance in range(1, board_size):
        upper = boards[:, :-distance]
        lower = boards[:, distance:]
        column_gap = np.abs(upper - lower)
        # Same column, then same diagonal
        collisions += (column_gap == 0).sum(axis=1)
        collisions += (column_gap == distance).sum(axis=1)
    return collisions


def calculate_fitness_batch(positions, fitness, population_size, board_size, target_fitness,
                            worker_count=None):
    """
    Calculates the fitness of every individual, batch by batch, on the host.

    The fitness is the target fitness minus one collision for every pair of
    queens sharing a column and one for every pair sharing a diagonal. All
    pairs of rows are checked, including those involving the last row.

    Args:
        positions (np.ndarray): uint16 matrix (population_size, board_size).
        fitness (np.ndarray): uint32 output vector (population_size,).
        population_size (int): Number of individuals to score.
        board_size (int): Number of rows per individual.
        target_fitness (int): Score of a board with no collisions.
        worker_count (int, optional): Number of logical workers scheduled, for
            parity with the GPU launch. Every individual is always scored;
            workers beyond the population are idle padding.
    """
    batch_size = _batch_size_for(board_size)

    for start in range(0, population_size, batch_size):
        stop = min(start + batch_size, population_size)
        # Signed copy so column differences can go negative.
        boards = positions[start:stop].astype(np.int32)
        collisions = count_collisions(boards)
        fitness[start:stop] = (target_fitness - collisions).astype(FITNESS_DTYPE)
