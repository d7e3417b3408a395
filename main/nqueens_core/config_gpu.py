"""
Configuration settings for accelerated fitness evaluation.

This file centralizes hardware-dependent parameters, such as launch
geometry and batch sizes, allowing for easy tuning without modifying
the kernels themselves.
"""

# Number of CUDA threads per block for the fitness kernel. One thread
# scores one individual.
THREADS_PER_BLOCK = 256

# Number of blocks in the launch grid. None derives the smallest grid that
# covers the population; a larger value only adds idle padding threads.
GRID_BLOCKS = None

# Maximum number of individuals scored together by the host backend.
HOST_EVALUATION_BATCH_SIZE = 512

# Upper bound on (individuals x board rows) held in host scratch memory at
# once. Large boards shrink the batch so memory stays bounded; even a single
# board never holds more than one row slice of its queen pairs at a time.
HOST_EVALUATION_ELEMENT_BUDGET = 1_000_000
