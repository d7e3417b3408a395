import cupy as cp

from . import config_gpu
from . import problem_definition_gpu
from .device import DeviceMirror
from .errors import DeviceError
from .population import POSITION_DTYPE, FITNESS_DTYPE
from utils.logger import get_logger

logger = get_logger(__name__)

_CUDA_ERRORS = (
    cp.cuda.runtime.CUDARuntimeError,
    cp.cuda.driver.CUDADriverError,
    cp.cuda.memory.OutOfMemoryError,
    cp.cuda.compiler.CompileException,
)


def is_available():
    return problem_definition_gpu.is_available()


class GpuDevice:
    """
    Runs the fitness kernel on a CUDA device through CuPy.

    Every CUDA failure is re-raised as a DeviceError naming the operation,
    since there is no degraded mode for a failed allocation or transfer.

    Args:
        device_id (int): CUDA device ordinal. Defaults to 0.
    """

    name = "gpu"

    def __init__(self, device_id=0):
        try:
            self._device = cp.cuda.Device(device_id)
            self._device.use()
            properties = cp.cuda.runtime.getDeviceProperties(device_id)
        except _CUDA_ERRORS as e:
            raise DeviceError(f"select CUDA device {device_id}", e) from e
        device_name = properties["name"]
        if isinstance(device_name, bytes):
            device_name = device_name.decode(errors="replace")
        logger.info(f"Evaluating fitness on CUDA device {device_id}: {device_name}")

    def allocate(self, population_size, board_size):
        try:
            return DeviceMirror(
                positions=cp.empty((population_size, board_size), dtype=POSITION_DTYPE),
                fitness=cp.zeros(population_size, dtype=FITNESS_DTYPE),
            )
        except _CUDA_ERRORS as e:
            raise DeviceError("allocate device population", e) from e

    def upload(self, host_array, device_array):
        try:
            device_array.set(host_array)
        except _CUDA_ERRORS as e:
            raise DeviceError("copy population to device", e) from e

    def download(self, device_array, host_array):
        try:
            # asnumpy blocks until the copy has completed.
            host_array[...] = cp.asnumpy(device_array)
        except _CUDA_ERRORS as e:
            raise DeviceError("copy fitness to host", e) from e

    def synchronize(self):
        try:
            self._device.synchronize()
        except _CUDA_ERRORS as e:
            raise DeviceError("synchronize device", e) from e

    def launch_fitness(self, mirror, population_size, board_size, target_fitness, worker_count=None):
        threads = None
        blocks = None
        if worker_count is not None:
            threads = config_gpu.THREADS_PER_BLOCK
            blocks = -(-worker_count // threads)
        try:
            problem_definition_gpu.calculate_fitness_batch(
                mirror.positions, mirror.fitness, population_size, board_size, target_fitness,
                threads_per_block=threads, grid_blocks=blocks,
            )
        except _CUDA_ERRORS as e:
            raise DeviceError("launch fitness kernel", e) from e
