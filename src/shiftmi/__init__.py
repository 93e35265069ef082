"""
shiftmi - Shifted Mutual Information

Histogram-based mutual information between two time series, swept over a
range of time lags and optionally stabilized by bootstrap resampling.
"""

__version__ = "0.1.0"

# Backend used by shiftmi.utils.parallel.parallel_executor
PARALLEL_BACKEND = "threading"

_PARALLEL_BACKENDS = ("loky", "threading", "multiprocessing")


def set_parallel_backend(backend):
    """Set the joblib backend used for all parallel sweeps.

    Parameters
    ----------
    backend : str
        One of 'loky', 'threading' or 'multiprocessing'.

    Raises
    ------
    ValueError
        If the backend is not supported.
    """
    global PARALLEL_BACKEND
    if backend not in _PARALLEL_BACKENDS:
        raise ValueError(
            f"Unsupported parallel backend: {backend}. "
            f"Supported backends: {', '.join(_PARALLEL_BACKENDS)}"
        )
    PARALLEL_BACKEND = backend


# Core modules
from . import information
from . import sweep
from . import utils

# Key classes
from .information import Histogram1D, Histogram2D, OUT_OF_RANGE

# Index mapping
from .information import calculate_indices_1d, calculate_indices_2d

# Sweeps
from .sweep import (
    bootstrapped_mi,
    get_shifted_mi,
    shift_lags,
    shifted_mutual_information,
    shifted_mutual_information_with_bootstrap,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "PARALLEL_BACKEND",
    "set_parallel_backend",
    # Modules
    "information",
    "sweep",
    "utils",
    # Core classes
    "Histogram1D",
    "Histogram2D",
    "OUT_OF_RANGE",
    # Index mapping
    "calculate_indices_1d",
    "calculate_indices_2d",
    # Sweeps
    "bootstrapped_mi",
    "get_shifted_mi",
    "shift_lags",
    "shifted_mutual_information",
    "shifted_mutual_information_with_bootstrap",
]
