"""
Binning and histogram-based mutual information for shiftmi.

This module provides the value-to-bin mapping and the joint histogram
that all mutual information estimates in shiftmi are built on.
"""

# Value to bin index mapping
from .binning import (
    OUT_OF_RANGE,
    calculate_index,
    calculate_indices_1d,
    calculate_indices_2d,
    validate_axis,
)

# Histograms
from .histogram import (
    Histogram1D,
    Histogram2D,
)

__all__ = [
    "OUT_OF_RANGE",
    "calculate_index",
    "calculate_indices_1d",
    "calculate_indices_2d",
    "validate_axis",
    "Histogram1D",
    "Histogram2D",
]
