"""
Genetic N-Queens solver whose fitness evaluation runs on a CUDA device
(through CuPy) or, when no device is present, on the host with NumPy.
"""

__version__ = "0.1.0"
