import numpy as np
from typing import Sequence

from .individual import Individual


# ===================================================================
#
#           Population Storage
#
# The population lives in two places during a generation: the host
# copy below (always the canonical one) and a mirror in device memory
# owned by the PopulationStore. The mirror is refreshed by an explicit
# upload and is stale again as soon as the fitness has been pulled back.
#
# ===================================================================

POSITION_DTYPE = np.uint16
FITNESS_DTYPE = np.uint32
UNEVALUATED_FITNESS = 0


class Population:
    """
    Host-resident population stored as flat arrays.

    Attributes:
        positions (np.ndarray): uint16 matrix of shape (population_size, board_size);
                                row i holds the queen columns of individual i.
        fitness (np.ndarray): uint32 vector of shape (population_size,).
    """

    def __init__(self, positions, fitness=None):
        positions = np.ascontiguousarray(positions, dtype=POSITION_DTYPE)
        if positions.ndim != 2:
            raise ValueError(f"Positions must be a 2-D array, got shape {positions.shape}")
        if fitness is None:
            fitness = np.full(positions.shape[0], UNEVALUATED_FITNESS, dtype=FITNESS_DTYPE)
        fitness = np.ascontiguousarray(fitness, dtype=FITNESS_DTYPE)
        if fitness.shape != (positions.shape[0],):
            raise ValueError(
                f"Fitness shape {fitness.shape} does not match {positions.shape[0]} individuals"
            )
        self.positions = positions
        self.fitness = fitness

    @classmethod
    def from_individuals(cls, individuals: Sequence[Individual]) -> "Population":
        positions = np.array([ind.positions for ind in individuals], dtype=POSITION_DTYPE)
        fitness = np.array([ind.fitness for ind in individuals], dtype=FITNESS_DTYPE)
        return cls(positions, fitness)

    @property
    def size(self) -> int:
        return self.positions.shape[0]

    @property
    def board_size(self) -> int:
        return self.positions.shape[1]

    def __len__(self):
        return self.size

    def individual(self, index: int) -> Individual:
        """Returns a value copy of one individual."""
        return Individual(
            fitness=int(self.fitness[index]),
            positions=[int(column) for column in self.positions[index]],
        )

    def reorder(self, order) -> "Population":
        """Returns a new population holding the individuals in ``order``."""
        return Population(self.positions[order], self.fitness[order])


class PopulationStore:
    """
    Owns the canonical host population and its mirror in device memory.

    Why (Purpose and Necessity):
    Host and device are separate address spaces. Results written by the
    kernel are not visible on the host until they are explicitly copied back,
    and reading the host fitness before that copy completes would rank stale
    scores. Keeping both buffers and both copy directions in one object makes
    the transfer order explicit and checkable.

    What (Implementation Details):
    - The device mirror is allocated once, sized for the whole run, before
      the first generation.
    - ``upload()`` copies the host positions into the mirror.
    - ``download()`` waits for the device to finish and copies the fitness
      vector back; it returns only after the data has landed on the host.
    - ``replace()`` swaps in the next generation and marks the mirror stale.

    Args:
        device: A HostDevice or GpuDevice (see device.py / device_gpu.py).
        population (Population): The initial host population.
    """

    def __init__(self, device, population: Population):
        self.device = device
        self.host = population
        self.mirror = device.allocate(population.size, population.board_size)
        self._mirror_current = False

    @property
    def mirror_current(self) -> bool:
        return self._mirror_current

    def replace(self, population: Population) -> None:
        if population.positions.shape != self.host.positions.shape:
            raise ValueError(
                f"Population shape changed from {self.host.positions.shape} "
                f"to {population.positions.shape}"
            )
        self.host = population
        self._mirror_current = False

    def upload(self) -> None:
        self.device.upload(self.host.positions, self.mirror.positions)
        self._mirror_current = True

    def download(self) -> None:
        if not self._mirror_current:
            raise RuntimeError("Fitness download requested before the population was uploaded")
        self.device.synchronize()
        self.device.download(self.mirror.fitness, self.host.fitness)
        # The scores are on the host now; the mirror is scratch until the next upload.
        self._mirror_current = False
