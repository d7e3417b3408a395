# ===================================================================
#
#           Configuration File for the N-Queens Genetic Solver
#
# This file centralizes all tunable parameters of the genetic
# algorithm. They are the defaults for run_solver.run_optimization_process(),
# whose arguments replace them for a single call without touching this
# module, so experiments do not require editing the core logic.
#
# ===================================================================

# --- Problem Settings ---
# Number of rows (and columns) of the board, i.e. the N in N-Queens.
BOARD_SIZE = 8


# --- Genetic Algorithm Core Settings ---
# The number of individual solutions (boards) in each generation.
POPULATION_SIZE = 1000
# The maximum number of generations to run. None means the evolution only
# stops once an ideal board has been found.
MAX_GENERATIONS = None
# The probability that a newly created child has one of its rows
# re-drawn at random.
MUTATION_RATE = 0.05
# How two parents are combined into a child:
#   - "midpoint": the first half of the rows comes from parent 1, the rest from parent 2
#   - "uniform": every row is taken from a randomly chosen parent
# A run always uses exactly one policy.
CROSSOVER_POLICY = "midpoint"
CROSSOVER_POLICIES = ("midpoint", "uniform")
# Seed for the random generator. None draws fresh entropy from the OS.
RANDOM_SEED = None


# --- Evaluation Backend Settings ---
# Where the fitness kernel runs:
#   - "gpu": CUDA device through CuPy (fails if unavailable)
#   - "cpu": vectorized NumPy evaluation on the host
#   - "auto": the GPU when CuPy and a device are present, otherwise the host
DEVICE = "auto"
DEVICES = ("auto", "gpu", "cpu")


# --- Output Settings ---
# Directory where the final board and fitness history are saved.
OUTPUT_DIR = "results"
# Set to True to write the result files after every run.
SAVE_RESULTS = False
# Console verbosity ("DEBUG", "INFO", "WARNING", "ERROR").
LOG_LEVEL = "INFO"
