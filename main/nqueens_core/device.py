import importlib.util
from dataclasses import dataclass
from typing import Any

import numpy as np

from . import config
from . import problem_definition
from .errors import ConfigurationError, DeviceError
from .population import POSITION_DTYPE, FITNESS_DTYPE, UNEVALUATED_FITNESS
from utils.logger import get_logger

logger = get_logger(__name__)


# ===================================================================
#
#           Evaluation Devices
#
# A device owns the memory the fitness kernel works on and the two
# copy directions between that memory and the host population.
# HostDevice keeps its buffers in separate NumPy arrays; GpuDevice
# (device_gpu.py) keeps them in CUDA memory through CuPy. Both expose
# the same interface, so the generation loop never branches on the
# backend.
#
# ===================================================================

@dataclass
class DeviceMirror:
    """Device-side copy of a population: positions in, fitness out."""
    positions: Any
    fitness: Any


class HostDevice:
    """
    Runs the fitness kernel on the host with NumPy.

    The mirror buffers are separate allocations from the host population,
    so uploads and downloads are real copies and the host never observes
    kernel output before ``download()``.
    """

    name = "cpu"

    def allocate(self, population_size, board_size):
        return DeviceMirror(
            positions=np.empty((population_size, board_size), dtype=POSITION_DTYPE),
            fitness=np.full(population_size, UNEVALUATED_FITNESS, dtype=FITNESS_DTYPE),
        )

    def upload(self, host_array, device_array):
        np.copyto(device_array, host_array)

    def download(self, device_array, host_array):
        np.copyto(host_array, device_array)

    def synchronize(self):
        # Host evaluation is synchronous.
        pass

    def launch_fitness(self, mirror, population_size, board_size, target_fitness, worker_count=None):
        problem_definition.calculate_fitness_batch(
            mirror.positions, mirror.fitness, population_size, board_size, target_fitness,
            worker_count=worker_count,
        )


def cupy_installed():
    return importlib.util.find_spec("cupy") is not None


def _load_gpu_backend():
    # Importing the backend imports CuPy itself, which can fail even when the
    # package is installed (wrong CUDA wheel, missing driver libraries).
    from . import device_gpu
    return device_gpu


def select_device(name=None):
    """
    Returns the evaluation device for a run.

    With "auto", any failure to load CuPy or to find a CUDA device falls back
    to the host with a warning; with "gpu" the same failure is a DeviceError.

    Args:
        name (str, optional): "gpu", "cpu" or "auto". Defaults to config.DEVICE.

    Returns:
        HostDevice or GpuDevice: The device to evaluate fitness on.

    Raises:
        ConfigurationError: If the name is not a known device.
        DeviceError: If "gpu" was requested but no CUDA device can be used.
    """
    name = (name or config.DEVICE).lower()
    if name not in config.DEVICES:
        raise ConfigurationError(f"Unknown device '{name}', expected one of {', '.join(config.DEVICES)}")

    if name == "cpu":
        return HostDevice()

    if not cupy_installed():
        if name == "gpu":
            raise DeviceError("load CuPy", "the 'cupy' package is not installed")
        logger.warning("CuPy is not installed; evaluating fitness on the host")
        return HostDevice()

    try:
        device_gpu = _load_gpu_backend()
        available = device_gpu.is_available()
    except (ImportError, RuntimeError, OSError) as e:
        if name == "gpu":
            raise DeviceError("load CuPy", e) from e
        logger.warning(f"CuPy could not be loaded ({e}); evaluating fitness on the host")
        return HostDevice()

    if not available:
        if name == "gpu":
            raise DeviceError("find a CUDA device", "no CUDA device is available")
        logger.warning("No CUDA device found; evaluating fitness on the host")
        return HostDevice()

    return device_gpu.GpuDevice()
