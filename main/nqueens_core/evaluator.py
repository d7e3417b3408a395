import numpy as np

from .device import HostDevice
from .population import Population, PopulationStore
from .problem_definition_base import calculate_target_fitness


# ===================================================================
#
#           Fitness Evaluation Step
#
# The only step of a generation that crosses the host/device boundary:
# upload the positions, run one kernel worker per individual, then
# wait for the device and pull the scores back. Ranking may only read
# the host fitness after evaluate_population() has returned.
#
# ===================================================================

def evaluate_population(store, worker_count=None):
    """
    Scores every individual of the store's host population on its device.

    Args:
        store (PopulationStore): The population and its device mirror.
        worker_count (int, optional): Number of kernel workers to schedule;
            workers beyond the population size are idle.

    Returns:
        Population: The host population, with fitness filled in.
    """
    population = store.host
    target_fitness = calculate_target_fitness(population.board_size)

    store.upload()
    store.device.launch_fitness(
        store.mirror, population.size, population.board_size, target_fitness,
        worker_count=worker_count,
    )
    store.download()
    return store.host


def evaluate_positions(positions, device=None):
    """
    Convenience wrapper that scores a bare position matrix.

    Args:
        positions (array-like): Matrix of shape (individuals, board_size), or a
            single board of shape (board_size,).
        device (optional): Evaluation device. Defaults to a HostDevice.

    Returns:
        np.ndarray: The fitness of every board (a 1-element array for a single board).
    """
    boards = np.atleast_2d(np.asarray(positions))
    population = Population(boards)
    store = PopulationStore(device or HostDevice(), population)
    return evaluate_population(store).fitness.copy()
