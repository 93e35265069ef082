"""
Joint and marginal histograms with lazily cached derived quantities.

Histogram2D counts co-occurrences of binned (x, y) pairs on a fixed grid and
derives the marginal histograms and the plug-in mutual information from it.

Both derived quantities are computed on first request and then cached. The
cache is NOT invalidated by later insertions: call ``reduce1d(force=True)`` or
``calculate_mutual_information(force=True)`` to refresh it after adding more
data.
"""

import warnings

import numpy as np
import scipy.stats

from ..utils.jit import is_jit_enabled
from .binning import OUT_OF_RANGE, _as_values, _map_values, calculate_index, validate_axis
from .histogram_jit import increment_jit, mutual_information_jit


def _as_indices(indices):
    """Return `indices` as a contiguous 1D int64 array."""
    indices = np.ascontiguousarray(indices, dtype=np.int64)
    if indices.ndim != 1:
        raise ValueError(f"Expected a 1D sequence of indices, got shape {indices.shape}")
    return indices


class Histogram1D:
    """One-dimensional histogram.

    Produced by :meth:`Histogram2D.reduce1d` as the projection of a joint
    histogram onto one of its axes, but usable on its own as well.

    Parameters
    ----------
    bins : int
        Number of bins, at least 1.
    vmin, vmax : float
        Axis range, vmin < vmax.

    Attributes
    ----------
    bins : int
        Number of bins.
    min, max : float
        Axis range.
    """

    def __init__(self, bins, vmin, vmax):
        validate_axis(bins, vmin, vmax)
        self.bins = int(bins)
        self.min = vmin
        self.max = vmax
        self._counts = np.zeros(self.bins, dtype=np.int64)
        self._count = 0

    @classmethod
    def from_counts(cls, counts, vmin, vmax):
        """Build a histogram from an existing vector of counts.

        Parameters
        ----------
        counts : array-like
            Non-negative integer counts, one per bin.
        vmin, vmax : float
            Axis range.

        Returns
        -------
        Histogram1D
        """
        counts = np.asarray(counts, dtype=np.int64)
        if counts.ndim != 1:
            raise ValueError(f"counts must be 1D, got shape {counts.shape}")
        if np.any(counts < 0):
            raise ValueError("counts must be non-negative")
        hist = cls(counts.shape[0], vmin, vmax)
        hist._counts = counts.copy()
        hist._count = int(counts.sum())
        return hist

    @property
    def count(self):
        """Total number of values inserted."""
        return self._count

    @property
    def histogram(self):
        """Read-only view of the bin counts."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    def accumulate(self, value):
        """Insert a single value; out-of-range values are ignored."""
        idx = calculate_index(self.bins, self.min, self.max, value)
        if idx != OUT_OF_RANGE:
            self._counts[idx] += 1
            self._count += 1

    def fill(self, values):
        """Insert a sequence of values; out-of-range values are ignored."""
        indices = _map_values(self.bins, self.min, self.max, _as_values(values))
        indices = indices[indices != OUT_OF_RANGE]
        self._counts += np.bincount(indices, minlength=self.bins)
        self._count += indices.shape[0]

    def calculate_entropy(self):
        """Shannon entropy of the histogram in bits.

        Empty bins contribute nothing (0 * log2(0) = 0).

        Returns
        -------
        float
            Entropy in bits, nan for an empty histogram.
        """
        if self._count == 0:
            return float("nan")
        return float(scipy.stats.entropy(self._counts, base=2))

    def __repr__(self):
        return f"Histogram1D(bins={self.bins}, min={self.min}, max={self.max}, count={self._count})"


class Histogram2D:
    """Two-dimensional histogram for mutual information estimation.

    Values outside the axis ranges are ignored on insertion; they neither
    raise nor count. The grid shape is fixed at construction.

    Parameters
    ----------
    bins_x, bins_y : int
        Number of bins on the x and y axis, at least 1.
    min_x, max_x : float
        Range of the first variable, min_x < max_x.
    min_y, max_y : float
        Range of the second variable, min_y < max_y.

    Notes
    -----
    ``count`` always equals the sum of all grid cells.

    The marginals (:meth:`reduce1d`) and the mutual information
    (:meth:`calculate_mutual_information`) are cached on first use and are
    not refreshed by later insertions unless ``force=True`` is passed.

    Examples
    --------
    >>> hist = Histogram2D(4, 4, 0.0, 1.0, 0.0, 1.0)
    >>> hist.fill([0.1, 0.4, 0.6, 0.9], [0.1, 0.4, 0.6, 0.9])
    >>> hist.count
    4
    >>> float(hist.calculate_mutual_information())
    2.0
    """

    def __init__(self, bins_x, bins_y, min_x, max_x, min_y, max_y):
        validate_axis(bins_x, min_x, max_x, "X")
        validate_axis(bins_y, min_y, max_y, "Y")
        self._bins_x = int(bins_x)
        self._bins_y = int(bins_y)
        self._min_x = min_x
        self._max_x = max_x
        self._min_y = min_y
        self._max_y = max_y
        self._counts = np.zeros((self._bins_x, self._bins_y), dtype=np.int64)
        self._count = 0
        self._marginals = None
        self._mutual_information = None

    # ---------- getters ----------
    @property
    def bins_x(self):
        return self._bins_x

    @property
    def bins_y(self):
        return self._bins_y

    @property
    def min_x(self):
        return self._min_x

    @property
    def max_x(self):
        return self._max_x

    @property
    def min_y(self):
        return self._min_y

    @property
    def max_y(self):
        return self._max_y

    @property
    def count(self):
        """Total number of pairs inserted."""
        return self._count

    @property
    def histogram(self):
        """Read-only view of the (bins_x, bins_y) count grid."""
        view = self._counts.view()
        view.flags.writeable = False
        return view

    # ---------- filling ----------
    def accumulate(self, x, y):
        """Insert a single (x, y) pair of raw values.

        Nothing happens if either value lies outside its axis range.
        """
        ix = calculate_index(self._bins_x, self._min_x, self._max_x, x)
        iy = calculate_index(self._bins_y, self._min_y, self._max_y, y)
        if ix != OUT_OF_RANGE and iy != OUT_OF_RANGE:
            self._counts[ix, iy] += 1
            self._count += 1

    def fill(self, x, y):
        """Insert paired sequences of raw values.

        Parameters
        ----------
        x, y : array-like
            1D sequences of equal length.

        Raises
        ------
        ValueError
            If x and y differ in length.
        """
        x = _as_values(x)
        y = _as_values(y)
        if x.shape[0] != y.shape[0]:
            raise ValueError(f"x and y must have the same size, got {x.shape[0]} and {y.shape[0]}")
        indices_x = _map_values(self._bins_x, self._min_x, self._max_x, x)
        indices_y = _map_values(self._bins_y, self._min_y, self._max_y, y)
        self._increment(indices_x, indices_y)

    def increment_at(self, ix, iy):
        """Increment the cell at precomputed indices by one.

        Indices that are negative or not smaller than the bin count of their
        axis are ignored silently.
        """
        if 0 <= ix < self._bins_x and 0 <= iy < self._bins_y:
            self._counts[ix, iy] += 1
            self._count += 1

    def increment(self, indices_x, indices_y):
        """Increment the histogram at paired precomputed indices.

        Parameters
        ----------
        indices_x, indices_y : array-like
            1D integer sequences of equal length, e.g. output of
            :func:`~shiftmi.information.binning.calculate_indices_1d`.
            Pairs with an invalid index on either axis are skipped.

        Raises
        ------
        ValueError
            If the sequences differ in length.
        """
        indices_x = _as_indices(indices_x)
        indices_y = _as_indices(indices_y)
        if indices_x.shape[0] != indices_y.shape[0]:
            raise ValueError(
                f"Index sequences must have the same size, got {indices_x.shape[0]} and {indices_y.shape[0]}"
            )
        self._increment(indices_x, indices_y)

    def increment_pairs(self, pairs):
        """Increment the histogram at (ix, iy) pairs.

        Parameters
        ----------
        pairs : array-like
            Integer array of shape (n, 2) as returned by
            :func:`~shiftmi.information.binning.calculate_indices_2d`.

        Raises
        ------
        ValueError
            If pairs is not of shape (n, 2).
        """
        pairs = np.asarray(pairs, dtype=np.int64)
        if pairs.size == 0:
            return
        if pairs.ndim != 2 or pairs.shape[1] != 2:
            raise ValueError(f"Index pairs must have shape (n, 2), got {pairs.shape}")
        self._increment(np.ascontiguousarray(pairs[:, 0]), np.ascontiguousarray(pairs[:, 1]))

    def _increment(self, indices_x, indices_y):
        if is_jit_enabled():
            self._count += int(increment_jit(self._counts, indices_x, indices_y))
            return

        ok = (
            (indices_x >= 0)
            & (indices_x < self._bins_x)
            & (indices_y >= 0)
            & (indices_y < self._bins_y)
        )
        flat = indices_x[ok] * self._bins_y + indices_y[ok]
        add = np.bincount(flat, minlength=self._bins_x * self._bins_y)
        self._counts += add.reshape(self._bins_x, self._bins_y)
        self._count += int(flat.shape[0])

    # ---------- arithmetic ----------
    def add(self, other):
        """Add the counts of another histogram to this one.

        Parameters
        ----------
        other : Histogram2D
            Histogram with the same number of bins on both axes.

        Raises
        ------
        TypeError
            If other is not a Histogram2D.
        ValueError
            If the bin counts differ.
        """
        if not isinstance(other, Histogram2D):
            raise TypeError(f"Can only add Histogram2D, got {type(other).__name__}")
        if (self._bins_x, self._bins_y) != (other._bins_x, other._bins_y):
            raise ValueError(
                f"Histogram shapes differ: ({self._bins_x}, {self._bins_y}) "
                f"vs ({other._bins_x}, {other._bins_y})"
            )
        self._counts += other._counts
        self._count += other._count

    def __iadd__(self, other):
        self.add(other)
        return self

    # ---------- derived quantities ----------
    def reduce1d(self, force=False):
        """Marginal histograms of both axes.

        Computed lazily: the first call sums the grid along each axis and
        caches the result, later calls return the cached pair even if the
        histogram has been filled further in the meantime.

        Parameters
        ----------
        force : bool, default=False
            Recompute from the current grid instead of using the cache.

        Returns
        -------
        tuple of Histogram1D
            (marginal over x, marginal over y).
        """
        if self._marginals is None or force:
            hist_x = Histogram1D.from_counts(self._counts.sum(axis=1), self._min_x, self._max_x)
            hist_y = Histogram1D.from_counts(self._counts.sum(axis=0), self._min_y, self._max_y)
            self._marginals = (hist_x, hist_y)
        return self._marginals

    def calculate_mutual_information(self, force=False):
        """Plug-in mutual information in bits.

        MI = H(X) + H(Y) - H(X,Y), with probabilities estimated as cell
        counts divided by ``count`` and empty cells skipped. No smoothing or
        bias correction is applied.

        Computed lazily like :meth:`reduce1d`.

        Parameters
        ----------
        force : bool, default=False
            Recompute from the current grid instead of using the cache.

        Returns
        -------
        float
            Mutual information in bits. nan (with a RuntimeWarning) if the
            histogram is empty; this result is not cached.
        """
        if self._mutual_information is not None and not force:
            return self._mutual_information

        if self._count == 0:
            warnings.warn(
                "Mutual information is undefined for an empty histogram, returning nan",
                RuntimeWarning,
            )
            return float("nan")

        if is_jit_enabled():
            mi = mutual_information_jit(self._counts, self._count)
        else:
            h_xy = scipy.stats.entropy(self._counts.ravel(), base=2)
            h_x = scipy.stats.entropy(self._counts.sum(axis=1), base=2)
            h_y = scipy.stats.entropy(self._counts.sum(axis=0), base=2)
            mi = h_x + h_y - h_xy

        # rounding noise on independent data
        self._mutual_information = max(float(mi), 0.0)
        return self._mutual_information

    def __repr__(self):
        return (
            f"Histogram2D(bins=({self._bins_x}, {self._bins_y}), "
            f"x=[{self._min_x}, {self._max_x}], y=[{self._min_y}, {self._max_y}], "
            f"count={self._count})"
        )
