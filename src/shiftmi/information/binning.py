"""
Mapping of continuous values onto histogram bin indices.

Both axes of a joint histogram are binned with the same rule:

- a value equal to the axis maximum goes into the last bin ``bins - 1``,
- a value in ``[min, max)`` goes into ``floor((value - min) / (max - min) * bins)``,
- anything else (including NaN) is marked with :data:`OUT_OF_RANGE`.

Out-of-range values are not an error; histograms skip them silently.
"""

import numpy as np

from ..utils.jit import is_jit_enabled
from .histogram_jit import calculate_indices_jit

#: Index assigned to values outside the closed axis range.
OUT_OF_RANGE = -1


def validate_axis(bins, vmin, vmax, axis=""):
    """Check bin count and range of one histogram axis.

    Parameters
    ----------
    bins : int
        Number of bins, must be at least 1.
    vmin, vmax : float
        Axis range, vmin must be strictly smaller than vmax.
    axis : str, optional
        Axis suffix used in error messages ('X' or 'Y').

    Raises
    ------
    TypeError
        If bins is not an integer.
    ValueError
        If vmin >= vmax, the range is not finite or bins < 1.
    """
    if isinstance(bins, bool) or not isinstance(bins, (int, np.integer)):
        raise TypeError(f"bins{axis} must be integer, got {type(bins).__name__}")
    if not vmin < vmax:
        raise ValueError(f"min{axis} has to be smaller than max{axis}, got {vmin} and {vmax}")
    # infinite bounds or an overflowing width make the bin scaling nan
    if not np.isfinite(float(vmax) - float(vmin)):
        raise ValueError(f"Range of axis{axis} must be finite, got {vmin} and {vmax}")
    if bins < 1:
        raise ValueError(f"There must be at least one bin{axis}, got {bins}")


def _as_values(values):
    """Return `values` as a contiguous 1D float64 array."""
    values = np.ascontiguousarray(values, dtype=np.float64)
    if values.ndim != 1:
        raise ValueError(f"Expected a 1D sequence of values, got shape {values.shape}")
    return values


def _map_values(bins, vmin, vmax, values):
    """Bin validated values with the JIT kernel or its NumPy equivalent."""
    if is_jit_enabled():
        return calculate_indices_jit(values, int(bins), float(vmin), float(vmax))

    indices = np.full(values.shape, OUT_OF_RANGE, dtype=np.int64)
    inside = (values >= vmin) & (values < vmax)
    scaled = (values[inside] - vmin) / (vmax - vmin) * bins
    indices[inside] = np.minimum(scaled.astype(np.int64), bins - 1)
    indices[values == vmax] = bins - 1
    return indices


def calculate_index(bins, vmin, vmax, value):
    """Map a single value onto its bin index.

    Parameters
    ----------
    bins : int
        Number of bins.
    vmin, vmax : float
        Axis range.
    value : float
        Value to map.

    Returns
    -------
    int
        Bin index in [0, bins) or OUT_OF_RANGE.
    """
    validate_axis(bins, vmin, vmax)
    if value == vmax:
        return int(bins) - 1
    if vmin <= value < vmax:
        return min(int((value - vmin) / (vmax - vmin) * bins), int(bins) - 1)
    return OUT_OF_RANGE


def calculate_indices_1d(bins, vmin, vmax, values):
    """Map a sequence of values onto bin indices.

    Parameters
    ----------
    bins : int
        Number of bins, at least 1.
    vmin, vmax : float
        Axis range with vmin < vmax. The range is closed: vmax itself falls
        into the last bin.
    values : array-like
        1D sequence of numbers.

    Returns
    -------
    np.ndarray
        int64 array of the same length as `values`, entries in [0, bins)
        or OUT_OF_RANGE (-1).

    Raises
    ------
    ValueError
        If vmin >= vmax or bins < 1.

    Examples
    --------
    >>> calculate_indices_1d(10, -500.0, 499.0, [-500, -401, -400, 499, 1000])
    array([ 0,  0,  1,  9, -1])
    """
    validate_axis(bins, vmin, vmax)
    return _map_values(bins, vmin, vmax, _as_values(values))


def calculate_indices_2d(bins_x, bins_y, min_x, max_x, min_y, max_y, x, y):
    """Map two paired sequences onto index pairs of a joint histogram.

    A pair is valid only if both of its values lie inside their closed axis
    ranges. Otherwise both of its indices are OUT_OF_RANGE.

    Parameters
    ----------
    bins_x, bins_y : int
        Number of bins per axis.
    min_x, max_x, min_y, max_y : float
        Axis ranges.
    x, y : array-like
        1D sequences of equal length.

    Returns
    -------
    np.ndarray
        int64 array of shape (n, 2); column 0 holds the x indices and
        column 1 the y indices.

    Raises
    ------
    ValueError
        If a range is empty, a bin count is smaller than 1, or the
        sequences differ in length.
    """
    validate_axis(bins_x, min_x, max_x, "X")
    validate_axis(bins_y, min_y, max_y, "Y")
    x = _as_values(x)
    y = _as_values(y)
    if x.shape[0] != y.shape[0]:
        raise ValueError(f"x and y must have the same size, got {x.shape[0]} and {y.shape[0]}")

    pairs = np.empty((x.shape[0], 2), dtype=np.int64)
    pairs[:, 0] = _map_values(bins_x, min_x, max_x, x)
    pairs[:, 1] = _map_values(bins_y, min_y, max_y, y)
    outside = (pairs[:, 0] == OUT_OF_RANGE) | (pairs[:, 1] == OUT_OF_RANGE)
    pairs[outside] = OUT_OF_RANGE
    return pairs
