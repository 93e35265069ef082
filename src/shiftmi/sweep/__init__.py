"""
Lag sweeps of histogram mutual information.

This module provides the shifted mutual information sweep, its bootstrapped
variant and the input validation shared by both.
"""

from .bootstrap import bootstrapped_mi

from .shift import (
    get_shifted_mi,
    shift_lags,
    shifted_mutual_information,
    shifted_mutual_information_with_bootstrap,
    shifted_pair,
)

from .validation import (
    validate_nr_samples,
    validate_shift_parameters,
)

__all__ = [
    "bootstrapped_mi",
    "get_shifted_mi",
    "shift_lags",
    "shifted_mutual_information",
    "shifted_mutual_information_with_bootstrap",
    "shifted_pair",
    "validate_nr_samples",
    "validate_shift_parameters",
]
