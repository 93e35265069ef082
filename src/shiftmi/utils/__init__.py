"""
Utility functions for shiftmi.

This module provides the JIT switch and the parallel execution helpers
shared by the information and sweep subpackages.
"""

# JIT utilities
from .jit import (
    conditional_njit,
    is_jit_enabled,
    jit_info,
)

# Parallel execution
from .parallel import (
    parallel_executor,
    get_parallel_backend,
    effective_n_jobs,
)

__all__ = [
    "conditional_njit",
    "is_jit_enabled",
    "jit_info",
    "parallel_executor",
    "get_parallel_backend",
    "effective_n_jobs",
]
