"""Tests for Histogram1D and Histogram2D."""

import warnings

import numpy as np
import pytest
from shiftmi.information.binning import calculate_indices_2d
from shiftmi.information.histogram import Histogram1D, Histogram2D


def make_hist(bins_x=10, bins_y=10):
    return Histogram2D(bins_x, bins_y, -1.0, 1.0, -1.0, 1.0)


class TestConstruction:
    """Tests for Histogram2D construction and getters."""

    def test_getters(self):
        hist = Histogram2D(3, 5, 0.0, 1.0, -2.0, 2.0)
        assert hist.bins_x == 3
        assert hist.bins_y == 5
        assert hist.min_x == 0.0
        assert hist.max_x == 1.0
        assert hist.min_y == -2.0
        assert hist.max_y == 2.0
        assert hist.count == 0
        assert hist.histogram.shape == (3, 5)
        assert hist.histogram.sum() == 0

    def test_histogram_view_is_read_only(self):
        hist = make_hist()
        with pytest.raises(ValueError):
            hist.histogram[0, 0] = 5

    @pytest.mark.parametrize(
        "args, match",
        [
            ((0, 2, 0.0, 1.0, 0.0, 1.0), "binX"),
            ((2, 0, 0.0, 1.0, 0.0, 1.0), "binY"),
            ((2, 2, 1.0, 1.0, 0.0, 1.0), "minX"),
            ((2, 2, 0.0, 1.0, 3.0, 1.0), "minY"),
            ((2, 2, -np.inf, np.inf, 0.0, 1.0), "axisX must be finite"),
            ((2, 2, 0.0, 1.0, -1e308, 1e308), "axisY must be finite"),
        ],
    )
    def test_invalid_parameters(self, args, match):
        with pytest.raises(ValueError, match=match):
            Histogram2D(*args)


class TestFilling:
    """Tests for accumulate, fill, increment_at, increment and increment_pairs."""

    def test_accumulate_counts_only_in_range(self):
        hist = make_hist()
        points = [(0.0, 0.0), (1.0, 1.0), (-1.0, -1.0), (1.5, 0.0), (0.0, -1.01), (np.nan, 0.0)]
        for x, y in points:
            hist.accumulate(x, y)
        assert hist.count == 3
        assert hist.histogram.sum() == hist.count
        assert hist.histogram[5, 5] == 1
        assert hist.histogram[9, 9] == 1
        assert hist.histogram[0, 0] == 1

    def test_fill_matches_accumulate(self):
        rng = np.random.default_rng(1)
        x = rng.uniform(-1.2, 1.2, 300)
        y = rng.uniform(-1.2, 1.2, 300)

        bulk = make_hist()
        bulk.fill(x, y)
        single = make_hist()
        for xi, yi in zip(x, y):
            single.accumulate(xi, yi)

        np.testing.assert_array_equal(bulk.histogram, single.histogram)
        assert bulk.count == single.count
        inside = (np.abs(x) <= 1.0) & (np.abs(y) <= 1.0)
        assert bulk.count == inside.sum()

    def test_fill_length_mismatch(self):
        with pytest.raises(ValueError, match="same size"):
            make_hist().fill([0.1, 0.2], [0.1])

    def test_increment_at_ignores_invalid_indices(self):
        hist = make_hist(3, 4)
        hist.increment_at(0, 0)
        hist.increment_at(2, 3)
        hist.increment_at(3, 0)
        hist.increment_at(0, 4)
        hist.increment_at(-1, 2)
        assert hist.count == 2
        assert hist.histogram[0, 0] == 1
        assert hist.histogram[2, 3] == 1

    def test_increment_bulk(self):
        hist = make_hist(3, 3)
        ix = np.array([0, 1, 2, 2, 5, -1, 1])
        iy = np.array([0, 1, 2, 2, 0, 1, 9])
        hist.increment(ix, iy)
        assert hist.count == 4
        assert hist.histogram[2, 2] == 2
        assert hist.histogram.sum() == 4

    def test_increment_length_mismatch(self):
        with pytest.raises(ValueError, match="same size"):
            make_hist().increment([0, 1], [0])

    def test_increment_pairs(self, ramp_2d):
        x, y = ramp_2d
        pairs = calculate_indices_2d(10, 10, x[0], x[-1], y[0], y[-1], x, y)
        hist = Histogram2D(10, 10, x[0], x[-1], y[0], y[-1])
        hist.increment_pairs(pairs)
        assert hist.count == 800
        # ramps are aligned, all mass on the diagonal
        assert np.trace(hist.histogram) == 800

    def test_increment_pairs_rejects_bad_shape(self):
        hist = make_hist(3, 3)
        with pytest.raises(ValueError, match=r"shape \(n, 2\)"):
            hist.increment_pairs([[0, 1, 2], [1, 2, 0]])
        with pytest.raises(ValueError, match=r"shape \(n, 2\)"):
            hist.increment_pairs([0, 1, 2, 1])
        assert hist.count == 0

    def test_increment_pairs_empty(self):
        hist = make_hist(3, 3)
        hist.increment_pairs(np.empty((0, 2), dtype=np.int64))
        hist.increment_pairs([])
        assert hist.count == 0

    def test_count_equals_in_range_calls(self):
        """count equals the number of calls whose coordinates were in range."""
        rng = np.random.default_rng(7)
        hist = make_hist(5, 5)
        expected = 0
        for _ in range(200):
            if rng.random() < 0.5:
                x, y = rng.uniform(-1.5, 1.5, 2)
                hist.accumulate(x, y)
                expected += int(abs(x) <= 1.0 and abs(y) <= 1.0)
            else:
                ix, iy = rng.integers(-2, 7, 2)
                hist.increment_at(ix, iy)
                expected += int(0 <= ix < 5 and 0 <= iy < 5)
        assert hist.count == expected
        assert hist.histogram.sum() == expected


class TestAdd:
    """Tests for elementwise addition of histograms."""

    def test_add_self_doubles(self):
        rng = np.random.default_rng(3)
        hist = make_hist()
        hist.fill(rng.uniform(-1, 1, 500), rng.uniform(-1, 1, 500))
        before = hist.histogram.copy()
        count = hist.count

        hist.add(hist)

        np.testing.assert_array_equal(hist.histogram, 2 * before)
        assert hist.count == 2 * count

    def test_add_other(self):
        a = make_hist(2, 2)
        b = make_hist(2, 2)
        a.increment_at(0, 0)
        b.increment_at(0, 0)
        b.increment_at(1, 0)
        a += b
        assert a.count == 3
        np.testing.assert_array_equal(a.histogram, [[2, 0], [1, 0]])
        # b is unchanged
        assert b.count == 2

    def test_add_ranges_may_differ(self):
        a = Histogram2D(2, 2, 0.0, 1.0, 0.0, 1.0)
        b = Histogram2D(2, 2, -5.0, 5.0, -5.0, 5.0)
        b.increment_at(1, 1)
        a.add(b)
        assert a.count == 1

    def test_add_shape_mismatch(self):
        with pytest.raises(ValueError, match="shapes differ"):
            make_hist(2, 3).add(make_hist(3, 2))

    def test_add_wrong_type(self):
        with pytest.raises(TypeError):
            make_hist().add(np.zeros((10, 10)))


class TestReduce1D:
    """Tests for marginal histograms and their lazy cache."""

    def test_marginals(self):
        hist = make_hist(2, 3)
        hist.increment([0, 0, 1, 1, 1], [0, 2, 2, 2, 1])
        hist_x, hist_y = hist.reduce1d()
        assert isinstance(hist_x, Histogram1D)
        np.testing.assert_array_equal(hist_x.histogram, [2, 3])
        np.testing.assert_array_equal(hist_y.histogram, [1, 1, 3])
        assert hist_x.count == hist_y.count == hist.count
        assert (hist_x.bins, hist_x.min, hist_x.max) == (2, -1.0, 1.0)

    def test_marginals_are_cached_without_invalidation(self):
        """Inserting after a lazy reduction leaves the cached marginals stale."""
        hist = make_hist(2, 2)
        hist.increment_at(0, 0)
        first = hist.reduce1d()
        hist.increment_at(1, 1)

        stale = hist.reduce1d()
        assert stale is first
        np.testing.assert_array_equal(stale[0].histogram, [1, 0])

        fresh = hist.reduce1d(force=True)
        np.testing.assert_array_equal(fresh[0].histogram, [1, 1])
        np.testing.assert_array_equal(fresh[1].histogram, [1, 1])
        # the forced result replaces the cache
        assert hist.reduce1d() is fresh


class TestMutualInformation:
    """Tests for calculate_mutual_information."""

    def test_diagonal(self):
        hist = make_hist(4, 4)
        hist.increment(np.arange(4), np.arange(4))
        assert hist.calculate_mutual_information() == pytest.approx(2.0)

    def test_independent_uniform(self):
        hist = make_hist(2, 2)
        hist.increment([0, 0, 1, 1], [0, 1, 0, 1])
        assert hist.calculate_mutual_information() == pytest.approx(0.0, abs=1e-12)

    def test_known_value(self):
        """2x2 table [[3, 1], [1, 3]]: MI = 1 - H_b(0.25)."""
        hist = make_hist(2, 2)
        hist.increment([0, 0, 0, 0, 1, 1, 1, 1], [0, 0, 0, 1, 1, 1, 1, 0])
        h_b = -0.25 * np.log2(0.25) - 0.75 * np.log2(0.75)
        assert hist.calculate_mutual_information() == pytest.approx(1.0 - h_b)

    def test_single_cell(self):
        hist = make_hist()
        hist.increment_at(3, 3)
        assert hist.calculate_mutual_information() == pytest.approx(0.0, abs=1e-12)

    def test_information_bounds(self):
        """0 <= MI <= min(H(X), H(Y))."""
        rng = np.random.default_rng(11)
        for trial in range(10):
            hist = Histogram2D(6, 9, -3.0, 3.0, -3.0, 3.0)
            x = rng.normal(size=400)
            y = trial / 10 * x + rng.normal(size=400)
            hist.fill(x, y)
            mi = hist.calculate_mutual_information()
            hist_x, hist_y = hist.reduce1d()
            bound = min(hist_x.calculate_entropy(), hist_y.calculate_entropy())
            assert 0.0 <= mi <= bound + 1e-9

    def test_equals_marginal_entropy_when_identical(self):
        rng = np.random.default_rng(5)
        x = rng.uniform(-1, 1, 1000)
        hist = make_hist()
        hist.fill(x, x)
        hist_x, _ = hist.reduce1d()
        assert hist.calculate_mutual_information() == pytest.approx(hist_x.calculate_entropy())

    def test_cached_without_invalidation(self):
        """MI stays at its first value until forced."""
        hist = make_hist(2, 2)
        hist.increment([0, 1], [0, 1])
        first = hist.calculate_mutual_information()
        assert first == pytest.approx(1.0)

        hist.increment([0, 1], [1, 0])
        assert hist.calculate_mutual_information() == first
        assert hist.calculate_mutual_information(force=True) == pytest.approx(0.0, abs=1e-12)

    def test_empty_histogram_is_nan(self):
        hist = make_hist()
        with pytest.warns(RuntimeWarning, match="empty histogram"):
            mi = hist.calculate_mutual_information()
        assert np.isnan(mi)

        # nan is not cached
        hist.increment([0, 1], [0, 1])
        assert hist.calculate_mutual_information() == pytest.approx(1.0)

    def test_out_of_range_only_is_empty(self):
        hist = make_hist()
        hist.fill([5.0, -5.0], [0.0, 0.0])
        assert hist.count == 0
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            assert np.isnan(hist.calculate_mutual_information())


class TestHistogram1D:
    """Tests for the 1D histogram."""

    def test_fill_and_accumulate(self):
        hist = Histogram1D(4, 0.0, 4.0)
        hist.fill([0.0, 1.5, 4.0, 4.5, -0.1])
        hist.accumulate(3.2)
        hist.accumulate(10.0)
        np.testing.assert_array_equal(hist.histogram, [1, 1, 0, 2])
        assert hist.count == 4

    def test_entropy(self):
        hist = Histogram1D.from_counts([25, 25, 25, 25, 0], 0.0, 1.0)
        assert hist.calculate_entropy() == pytest.approx(2.0)
        assert Histogram1D.from_counts([7, 0, 0], 0.0, 1.0).calculate_entropy() == pytest.approx(0.0)
        assert np.isnan(Histogram1D(3, 0.0, 1.0).calculate_entropy())

    def test_from_counts_validation(self):
        with pytest.raises(ValueError, match="non-negative"):
            Histogram1D.from_counts([1, -1], 0.0, 1.0)
        with pytest.raises(ValueError, match="1D"):
            Histogram1D.from_counts([[1, 2]], 0.0, 1.0)
        with pytest.raises(ValueError, match="smaller than max"):
            Histogram1D(2, 1.0, 0.0)
