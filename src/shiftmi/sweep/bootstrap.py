"""
Two-level bootstrap estimate of histogram mutual information.

Level 1 builds ``nr_samples`` sub-histograms, each from ``n // nr_samples``
index pairs drawn with replacement from the paired population. Level 2 draws
``nr_samples`` of these sub-histograms with replacement and adds them into a
single histogram whose mutual information is the estimate.
"""

import logging
from typing import Optional

import numpy as np

from ..information.binning import validate_axis
from ..information.histogram import Histogram2D, _as_indices
from .validation import validate_nr_samples


def bootstrapped_mi(
    indices_x,
    indices_y,
    bins_x,
    bins_y,
    min_x,
    max_x,
    min_y,
    max_y,
    nr_samples,
    seed=None,
    logger: Optional[logging.Logger] = None,
) -> float:
    """Bootstrapped mutual information of paired bin indices.

    Parameters
    ----------
    indices_x, indices_y : array-like
        Paired bin indices of equal length, typically the already shifted
        output of :func:`~shiftmi.information.binning.calculate_indices_1d`.
        Pairs with an out-of-range index are drawn like any other pair but
        never inserted.
    bins_x, bins_y : int
        Number of bins per axis.
    min_x, max_x, min_y, max_y : float
        Axis ranges of the histograms.
    nr_samples : int
        Number of sub-histograms, and number of draws from them.
    seed : int, np.random.Generator or None, optional
        Seed or generator for the resampling. None draws fresh OS entropy.
    logger : logging.Logger, optional
        Logger for debug messages.

    Returns
    -------
    float
        Mutual information of the combined histogram in bits. nan if no
        pair ended up in it (e.g. nr_samples larger than the population).

    Raises
    ------
    ValueError
        If the index sequences differ in length or are empty, or if
        nr_samples or the axis parameters are invalid.

    Notes
    -----
    The estimate is two-level: bagging of bagged histograms.
    With nr_samples == 1 it reduces to a single ordinary bootstrap
    resample of the population.

    Examples
    --------
    >>> ix = np.arange(100) % 10
    >>> mi = bootstrapped_mi(ix, ix, 10, 10, 0.0, 1.0, 0.0, 1.0, nr_samples=5, seed=0)
    >>> 0.0 < mi <= np.log2(10)
    True
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    validate_nr_samples(nr_samples)
    validate_axis(bins_x, min_x, max_x, "X")
    validate_axis(bins_y, min_y, max_y, "Y")
    indices_x = _as_indices(indices_x)
    indices_y = _as_indices(indices_y)
    n = indices_x.shape[0]
    if n != indices_y.shape[0]:
        raise ValueError(f"Index sequences must have the same size, got {n} and {indices_y.shape[0]}")
    if n == 0:
        raise ValueError("Cannot bootstrap an empty population")

    rng = np.random.default_rng(seed)
    nr_samples_per_histogram = n // nr_samples
    logger.debug(
        f"Bootstrap: population={n}, nr_samples={nr_samples}, "
        f"pairs per sub-histogram={nr_samples_per_histogram}"
    )

    # Level 1: sub-histograms from randomly drawn index pairs
    ensemble = []
    for _ in range(nr_samples):
        hist = Histogram2D(bins_x, bins_y, min_x, max_x, min_y, max_y)
        ridx = rng.integers(0, n, size=nr_samples_per_histogram)
        hist.increment(indices_x[ridx], indices_y[ridx])
        ensemble.append(hist)

    # Level 2: resample the sub-histograms and add them up
    final_hist = Histogram2D(bins_x, bins_y, min_x, max_x, min_y, max_y)
    for sample_idx in rng.integers(0, nr_samples, size=nr_samples):
        final_hist.add(ensemble[sample_idx])

    return final_hist.calculate_mutual_information()
