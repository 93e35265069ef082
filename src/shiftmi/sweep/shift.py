"""
Mutual information swept over a range of time lags.

For every lag the two index sequences are offset against each other, only
their overlap is paired, and a fresh Histogram2D is built from it. Lags are
independent and are evaluated in parallel; each worker owns all histograms it
creates, so no locking is needed.
"""

import logging
import time
from typing import Optional

import numpy as np
import tqdm

from ..information.binning import _as_values, calculate_indices_1d
from ..information.histogram import Histogram2D
from ..utils.parallel import delayed, effective_n_jobs, parallel_executor
from .bootstrap import bootstrapped_mi
from .validation import _check_integer, validate_nr_samples, validate_shift_parameters

# Offset between the bootstrap seeds of neighbouring lag slots
SEED_STRIDE = 10000


def shift_lags(shift_from, shift_to, shift_step=1):
    """Lag values of a sweep, in output order.

    Parameters
    ----------
    shift_from, shift_to : int
        First and last lag (inclusive).
    shift_step : int, default=1
        Distance between consecutive lags.

    Returns
    -------
    np.ndarray
        Lags ``shift_from, shift_from + shift_step, ...`` up to and including
        shift_to if it is reachable. Its length is
        ``(shift_to - shift_from) // shift_step + 1``.
    """
    return np.arange(shift_from, shift_to + 1, shift_step, dtype=np.int64)


def shifted_pair(indices_x, indices_y, lag):
    """Overlapping parts of two sequences at a given lag.

    Parameters
    ----------
    indices_x, indices_y : np.ndarray
        Sequences of equal length n.
    lag : int
        Negative: ``x[0:n+lag]`` is paired with ``y[-lag:n]``.
        Positive: ``x[lag:n]`` is paired with ``y[0:n-lag]``.
        Zero: full overlap.

    Returns
    -------
    tuple of np.ndarray
        Views of equal length ``n - abs(lag)``.
    """
    n = indices_x.shape[0]
    lag = int(lag)
    if lag < 0:
        return indices_x[: n + lag], indices_y[-lag:]
    if lag > 0:
        return indices_x[lag:], indices_y[: n - lag]
    return indices_x, indices_y


def _lag_mi(lag, indices_x, indices_y, hist_params, nr_samples, seed, slot):
    """Mutual information at a single lag, direct or bootstrapped."""
    px, py = shifted_pair(indices_x, indices_y, lag)
    if nr_samples is None:
        hist = Histogram2D(*hist_params)
        hist.increment(px, py)
        return hist.calculate_mutual_information()

    task_seed = seed + slot * SEED_STRIDE if seed is not None else None
    return bootstrapped_mi(px, py, *hist_params, nr_samples, seed=task_seed)


def _shifted_mi_chunk(lags, indices_x, indices_y, hist_params, nr_samples, seed, shift_from, shift_step):
    """Evaluate a chunk of lags serially; runs inside one worker."""
    values = np.empty(len(lags), dtype=np.float64)
    for k, lag in enumerate(lags):
        slot = (int(lag) - shift_from) // shift_step
        values[k] = _lag_mi(lag, indices_x, indices_y, hist_params, nr_samples, seed, slot)
    return values


def _sweep(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    min_x,
    max_x,
    min_y,
    max_y,
    x,
    y,
    shift_step,
    nr_samples,
    seed,
    n_jobs,
    backend,
    verbose,
    enable_progressbar,
    logger,
):
    x = _as_values(x)
    y = _as_values(y)
    validate_shift_parameters(
        x.shape[0], y.shape[0], shift_from, shift_to,
        bins_x, bins_y, min_x, max_x, min_y, max_y, shift_step,
    )
    if nr_samples is not None:
        validate_nr_samples(nr_samples)
    if seed is not None:
        _check_integer("seed", seed)
        if seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")

    start = time.perf_counter()
    shift_from = int(shift_from)
    shift_step = int(shift_step)

    # Shared read-only by all lags
    indices_x = calculate_indices_1d(bins_x, min_x, max_x, x)
    indices_y = calculate_indices_1d(bins_y, min_y, max_y, y)

    hist_params = (bins_x, bins_y, min_x, max_x, min_y, max_y)
    lags = shift_lags(shift_from, shift_to, shift_step)
    result = np.empty(lags.shape[0], dtype=np.float64)
    n_jobs_effective = effective_n_jobs(n_jobs, lags.shape[0])

    mode = "direct" if nr_samples is None else f"bootstrap (nr_samples={nr_samples})"
    logger.debug(
        f"Shift sweep [{shift_from}, {shift_to}] step {shift_step}: {lags.shape[0]} lags, "
        f"{mode}, n={x.shape[0]}, workers={n_jobs_effective}"
    )

    if n_jobs_effective == 1:
        for lag in tqdm.tqdm(lags, disable=not enable_progressbar, leave=False):
            slot = (int(lag) - shift_from) // shift_step
            result[slot] = _lag_mi(lag, indices_x, indices_y, hist_params, nr_samples, seed, slot)
    else:
        split_lags = np.array_split(lags, n_jobs_effective)
        with parallel_executor(n_jobs_effective, verbose=verbose, backend=backend, logger=logger) as parallel:
            chunk_values = parallel(
                delayed(_shifted_mi_chunk)(
                    chunk,
                    indices_x,
                    indices_y,
                    hist_params,
                    nr_samples,
                    seed,
                    shift_from,
                    shift_step,
                )
                for chunk in split_lags
            )
        for chunk, values in zip(split_lags, chunk_values):
            result[(chunk - shift_from) // shift_step] = values

    logger.debug(f"Shift sweep finished in {time.perf_counter() - start:.3f}s")
    return result


def shifted_mutual_information(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    min_x,
    max_x,
    min_y,
    max_y,
    x,
    y,
    shift_step=1,
    n_jobs=-1,
    backend=None,
    verbose=False,
    enable_progressbar=False,
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """Mutual information between x and lagged y for a range of lags.

    Parameters
    ----------
    shift_from, shift_to : int
        First and last lag (inclusive), shift_from < shift_to. Both
        magnitudes must be smaller than the data length.
    bins_x, bins_y : int
        Number of histogram bins per axis.
    min_x, max_x, min_y, max_y : float
        Axis ranges. Values outside them are left out of every histogram.
    x, y : array-like
        1D data sequences of equal length.
    shift_step : int, default=1
        Distance between consecutive lags.
    n_jobs : int, default=-1
        Number of parallel workers; -1 uses all cores. Never more workers
        than lags are started.
    backend : str, optional
        joblib backend for this call, overrides shiftmi.PARALLEL_BACKEND.
    verbose : bool, default=False
        Log the parallel configuration at INFO level.
    enable_progressbar : bool, default=False
        Show a tqdm progress bar. Only used when the sweep runs serially.
    logger : logging.Logger, optional
        Logger for debug messages.

    Returns
    -------
    np.ndarray
        MI values in bits; entry k belongs to lag
        ``shift_from + k * shift_step`` (see :func:`shift_lags`).

    Raises
    ------
    TypeError
        If a shift parameter or bin count is not an integer.
    ValueError
        If the sequences differ in length, a range or bin count is invalid,
        shift_from >= shift_to, shift_step < 1 or a shift does not fit the
        data.

    Notes
    -----
    A negative lag pairs the head of x with the tail of y (x leads), a
    positive lag pairs the tail of x with the head of y.

    Examples
    --------
    >>> data = np.sin(0.01 * np.arange(1000))
    >>> mi = shifted_mutual_information(-100, 100, 10, 10, -1.0, 1.0, -1.0, 1.0, data, data)
    >>> len(mi), int(np.argmax(mi))
    (201, 100)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    return _sweep(
        shift_from, shift_to, bins_x, bins_y, min_x, max_x, min_y, max_y, x, y,
        shift_step, None, None, n_jobs, backend, verbose, enable_progressbar, logger,
    )


def shifted_mutual_information_with_bootstrap(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    min_x,
    max_x,
    min_y,
    max_y,
    x,
    y,
    nr_samples,
    shift_step=1,
    seed=None,
    n_jobs=-1,
    backend=None,
    verbose=False,
    enable_progressbar=False,
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """Bootstrapped mutual information for a range of lags.

    Same as :func:`shifted_mutual_information`, but the MI of every lag is
    estimated with :func:`~shiftmi.sweep.bootstrap.bootstrapped_mi`.

    Parameters
    ----------
    nr_samples : int
        Number of bootstrap sub-histograms per lag, at least 1.
    seed : int, optional
        Base seed. The lag in output slot k is resampled with seed
        ``seed + k * 10000``, so results are reproducible regardless of
        n_jobs and scheduling. None draws fresh OS entropy for every lag.

    The remaining parameters are those of :func:`shifted_mutual_information`.

    Returns
    -------
    np.ndarray
        Bootstrapped MI values in bits, one per lag.

    Raises
    ------
    TypeError
        If nr_samples, seed or a shift parameter is not an integer.
    ValueError
        As for :func:`shifted_mutual_information`, and if nr_samples < 1.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    return _sweep(
        shift_from, shift_to, bins_x, bins_y, min_x, max_x, min_y, max_y, x, y,
        shift_step, nr_samples, seed, n_jobs, backend, verbose, enable_progressbar, logger,
    )


def get_shifted_mi(
    x,
    y,
    shift_range=(-500, 500),
    bin_sizes=(10, 10),
    shift_step=1,
    nr_samples=None,
    seed=None,
    **kwargs,
):
    """Shifted mutual information with axis ranges taken from the data.

    Parameters
    ----------
    x, y : array-like
        1D data sequences of equal length.
    shift_range : tuple of int, default=(-500, 500)
        (shift_from, shift_to), both inclusive.
    bin_sizes : tuple of int, default=(10, 10)
        Number of bins for x and y.
    shift_step : int, default=1
        Distance between consecutive lags.
    nr_samples : int, optional
        If given, every lag is estimated by bootstrapping with this many
        sub-histograms.
    seed : int, optional
        Base seed for bootstrapping, ignored otherwise.
    **kwargs
        Forwarded to the sweep (n_jobs, backend, verbose, ...).

    Returns
    -------
    np.ndarray
        MI values in bits, one per lag.

    Notes
    -----
    NaN values are ignored when determining the ranges and never binned.
    A constant sequence has an empty range and is rejected.
    """
    x = _as_values(x)
    y = _as_values(y)
    shift_from, shift_to = shift_range
    bins_x, bins_y = bin_sizes
    min_x, max_x = float(np.nanmin(x)), float(np.nanmax(x))
    min_y, max_y = float(np.nanmin(y)), float(np.nanmax(y))

    if nr_samples is None:
        return shifted_mutual_information(
            shift_from, shift_to, bins_x, bins_y, min_x, max_x, min_y, max_y, x, y,
            shift_step=shift_step, **kwargs,
        )
    return shifted_mutual_information_with_bootstrap(
        shift_from, shift_to, bins_x, bins_y, min_x, max_x, min_y, max_y, x, y,
        nr_samples, shift_step=shift_step, seed=seed, **kwargs,
    )
