import cupy as cp
import numpy as np

from . import config_gpu


# ===================================================================
#
#           Fitness Kernel for N-Queens (GPU Version)
#
# One CUDA thread scores one individual. A thread reads only its own
# slice of the flattened position buffer and writes only its own
# fitness slot, so no synchronization between threads is needed.
# Threads past the end of the population return immediately.
#
# ===================================================================

_FITNESS_KERNEL_SOURCE = r'''
extern "C" __global__
void calculate_fitness(const unsigned short* positions,
                       unsigned int* fitness,
                       const int population_size,
                       const int board_size,
                       const unsigned int target_fitness)
{
    const long long individual_index = (long long)blockIdx.x * blockDim.x + threadIdx.x;

    // Padding threads of the last block have no individual to score
    if (individual_index >= population_size) {
        return;
    }

    const unsigned short* queens = positions + individual_index * board_size;

    unsigned int collisions = 0;
    for (int row = 0; row < board_size; row++) {
        const int column = queens[row];
        for (int other_row = row + 1; other_row < board_size; other_row++) {
            const int other_column = queens[other_row];

            // Same column
            if (column == other_column) {
                collisions++;
            }

            // Same diagonal
            if (abs(column - other_column) == other_row - row) {
                collisions++;
            }
        }
    }

    fitness[individual_index] = target_fitness - collisions;
}
'''

_fitness_kernel = cp.RawKernel(_FITNESS_KERNEL_SOURCE, 'calculate_fitness')


def is_available():
    """Returns True if at least one CUDA device can be used."""
    try:
        return cp.cuda.runtime.getDeviceCount() > 0
    except cp.cuda.runtime.CUDARuntimeError:
        return False


def launch_geometry(population_size, threads_per_block=None, grid_blocks=None):
    """
    Computes the (blocks, threads) launch configuration for a population.

    Args:
        population_size (int): Number of individuals to score.
        threads_per_block (int, optional): Defaults to config_gpu.THREADS_PER_BLOCK.
        grid_blocks (int, optional): Explicit grid size. Defaults to
            config_gpu.GRID_BLOCKS, or the smallest grid covering the population.

    Returns:
        tuple[int, int]: Number of blocks and threads per block.
    """
    threads = threads_per_block or config_gpu.THREADS_PER_BLOCK
    needed_blocks = max(1, -(-population_size // threads))
    blocks = grid_blocks or config_gpu.GRID_BLOCKS or needed_blocks
    # A configured grid smaller than the population would leave individuals unscored.
    return max(blocks, needed_blocks), threads


def calculate_fitness_batch(positions, fitness, population_size, board_size, target_fitness,
                            threads_per_block=None, grid_blocks=None):
    """
    Launches the fitness kernel for the whole population on the current device.

    The launch is asynchronous; callers must synchronize the device before
    reading ``fitness`` back to the host.

    Args:
        positions (cp.ndarray): uint16 device matrix (population_size, board_size).
        fitness (cp.ndarray): uint32 device output vector (population_size,).
        population_size (int): Number of individuals to score.
        board_size (int): Number of rows per individual.
        target_fitness (int): Score of a board with no collisions.
        threads_per_block (int, optional): Overrides the configured block size.
        grid_blocks (int, optional): Overrides the configured grid size.
    """
    blocks, threads = launch_geometry(population_size, threads_per_block, grid_blocks)
    _fitness_kernel(
        (blocks,), (threads,),
        (positions, fitness, np.int32(population_size), np.int32(board_size), np.uint32(target_fitness)),
    )
