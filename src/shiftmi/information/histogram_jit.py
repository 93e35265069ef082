"""JIT-compiled binning and histogram kernels.

These functions provide the compiled counterparts of the NumPy code paths in
:mod:`shiftmi.information.binning` and :mod:`shiftmi.information.histogram`.
All kernels release the GIL so that the threading backend runs them
concurrently.
"""

import numpy as np

from ..utils.jit import conditional_njit


@conditional_njit(nogil=True)
def calculate_indices_jit(values, bins, vmin, vmax):
    """JIT-compiled mapping of values to bin indices.

    Parameters
    ----------
    values : np.ndarray
        1D float64 array.
    bins : int
        Number of bins.
    vmin, vmax : float
        Axis range, vmin < vmax.

    Returns
    -------
    np.ndarray
        int64 indices in [0, bins), -1 for values outside [vmin, vmax].
    """
    n = values.shape[0]
    out = np.empty(n, dtype=np.int64)
    width = vmax - vmin
    for i in range(n):
        v = values[i]
        if v == vmax:
            out[i] = bins - 1
        elif v >= vmin and v < vmax:
            idx = int((v - vmin) / width * bins)
            # rounding can push values just below vmax onto the upper edge
            if idx >= bins:
                idx = bins - 1
            out[i] = idx
        else:
            out[i] = -1
    return out


@conditional_njit(nogil=True)
def increment_jit(counts, indices_x, indices_y):
    """Increment a 2D count grid at paired index positions.

    Pairs with a negative index or an index beyond the grid on either axis
    are skipped.

    Parameters
    ----------
    counts : np.ndarray
        2D int64 grid, modified in place.
    indices_x, indices_y : np.ndarray
        1D int64 arrays of equal length.

    Returns
    -------
    int
        Number of pairs actually inserted.
    """
    bins_x = counts.shape[0]
    bins_y = counts.shape[1]
    added = 0
    for i in range(indices_x.shape[0]):
        ix = indices_x[i]
        iy = indices_y[i]
        if ix >= 0 and ix < bins_x and iy >= 0 and iy < bins_y:
            counts[ix, iy] += 1
            added += 1
    return added


@conditional_njit(nogil=True)
def mutual_information_jit(counts, total):
    """JIT-compiled plug-in mutual information of a 2D count grid.

    Parameters
    ----------
    counts : np.ndarray
        2D int64 grid.
    total : int
        Sum of all cells, must be positive.

    Returns
    -------
    float
        H(X) + H(Y) - H(X,Y) in bits.
    """
    n = float(total)
    bins_x = counts.shape[0]
    bins_y = counts.shape[1]

    h_xy = 0.0
    h_x = 0.0
    for i in range(bins_x):
        row = 0
        for j in range(bins_y):
            c = counts[i, j]
            row += c
            if c > 0:
                p = c / n
                h_xy -= p * np.log2(p)
        if row > 0:
            p = row / n
            h_x -= p * np.log2(p)

    h_y = 0.0
    for j in range(bins_y):
        col = 0
        for i in range(bins_x):
            col += counts[i, j]
        if col > 0:
            p = col / n
            h_y -= p * np.log2(p)

    return h_x + h_y - h_xy
