# ===================================================================
#
#           Error Types for the N-Queens Solver
#
# Configuration errors are raised before any device memory is touched.
# Device errors are fatal for the run and name the failing operation.
#
# ===================================================================


class NQueensError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(NQueensError, ValueError):
    """An invalid board size, population size, budget or operator setting."""


class DeviceError(NQueensError, RuntimeError):
    """
    A device allocation, transfer or kernel launch failed.

    Args:
        operation (str): Short description of what was being attempted,
                         e.g. "allocate device population".
        cause (Exception, optional): The underlying CuPy/CUDA exception.
    """

    def __init__(self, operation, cause=None):
        self.operation = operation
        self.cause = cause
        message = f"Device operation '{operation}' failed"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
