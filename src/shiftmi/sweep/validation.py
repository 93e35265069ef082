"""
Input validation for shifted mutual information.

All checks run before any binning or histogram work starts, so a failed
validation never leaves partial results behind.
"""

import numpy as np

from ..information.binning import validate_axis


def _check_integer(name, value):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{name} must be integer, got {type(value).__name__}")


def validate_shift_parameters(
    size_x, size_y, shift_from, shift_to, bins_x, bins_y, min_x, max_x, min_y, max_y, shift_step
) -> None:
    """
    Validate the parameters of a shifted mutual information sweep.

    Parameters
    ----------
    size_x, size_y : int
        Lengths of the two data sequences.
    shift_from, shift_to : int
        First and last lag of the sweep (both inclusive).
    bins_x, bins_y : int
        Number of bins per axis.
    min_x, max_x, min_y, max_y : float
        Axis ranges.
    shift_step : int
        Distance between consecutive lags.

    Raises
    ------
    TypeError
        If a shift parameter or bin count is not an integer.
    ValueError
        If the sequences differ in length, shift_from >= shift_to, an axis
        range or bin count is invalid, a shift magnitude is not smaller than
        the data length, or shift_step < 1.
    """
    _check_integer("shift_from", shift_from)
    _check_integer("shift_to", shift_to)
    _check_integer("shift_step", shift_step)

    if size_x != size_y:
        raise ValueError(f"x and y must have the same size, got {size_x} and {size_y}")
    if shift_from >= shift_to:
        raise ValueError(f"shift_from has to be smaller than shift_to, got {shift_from} and {shift_to}")
    validate_axis(bins_x, min_x, max_x, "X")
    validate_axis(bins_y, min_y, max_y, "Y")
    if abs(shift_to) >= size_x:
        raise ValueError(f"Maximum shift {shift_to} does not fit data size {size_x}")
    if abs(shift_from) >= size_x:
        raise ValueError(f"Minimum shift {shift_from} does not fit data size {size_x}")
    if shift_step < 1:
        raise ValueError(f"shift_step must be greater or equal 1, got {shift_step}")


def validate_nr_samples(nr_samples) -> None:
    """
    Validate the number of bootstrap sub-histograms.

    Raises
    ------
    TypeError
        If nr_samples is not an integer.
    ValueError
        If nr_samples < 1.
    """
    _check_integer("nr_samples", nr_samples)
    if nr_samples < 1:
        raise ValueError(f"nr_samples must be positive, got {nr_samples}")
