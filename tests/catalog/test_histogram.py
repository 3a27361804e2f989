"""
Tests for histogram binning
"""

import numpy as np
import pytest

from rastertiler.catalog.statistics import compute_histogram, compute_histogram_bins
from rastertiler.core.exceptions import InvalidRequestError
from rastertiler.core.types import BandStats
from rastertiler.io.reader import RasterReader


class TestComputeHistogramBins:
    """Test compute_histogram_bins"""

    def test_counts_every_value_in_range(self):
        counts, edges = compute_histogram_bins(np.arange(100), 0, 99, 10)
        assert len(counts) == 10
        assert sum(counts) == 100
        assert len(edges) == 11
        assert edges[0] == 0.0
        assert edges[10] == pytest.approx(99.0)

    def test_min_and_max_land_in_end_bins(self):
        counts, _ = compute_histogram_bins(np.array([0.0, 10.0]), 0, 10, 10)
        assert counts[0] == 1
        assert counts[9] == 1
        assert sum(counts) == 2

    def test_out_of_range_values_skipped(self):
        counts, _ = compute_histogram_bins(np.array([-1.0, 5.0, 11.0]), 0, 10, 5)
        assert sum(counts) == 1

    def test_nodata_and_nan_skipped(self):
        values = np.array([np.nan, -9999.0, 1.0, 2.0])
        counts, _ = compute_histogram_bins(values, 0, 10, 4, nodata=-9999.0)
        assert sum(counts) == 2

    def test_zero_range_puts_everything_in_first_bin(self):
        counts, edges = compute_histogram_bins(np.full(7, 3.0), 3.0, 3.0, 4)
        assert counts == [7, 0, 0, 0]
        assert edges == [3.0] * 5

    def test_single_bin(self):
        counts, edges = compute_histogram_bins(np.arange(10), 0, 9, 1)
        assert counts == [10]
        assert edges == [0.0, 9.0]

    def test_two_dimensional_input(self):
        counts, _ = compute_histogram_bins(np.ones((4, 4)), 0, 2, 2)
        assert sum(counts) == 16

    def test_invalid_bin_count(self):
        with pytest.raises(InvalidRequestError):
            compute_histogram_bins(np.arange(10), 0, 9, 0)


class TestComputeHistogram:
    """Test compute_histogram against a raster"""

    def test_gradient_band(self, rgb_tif):
        stats = BandStats(band=1, min=0.0, max=255.0, mean=127.5, std_dev=73.9)
        with RasterReader(rgb_tif) as reader:
            hist = compute_histogram(reader, 1, stats, bin_count=16)
        assert hist.band == 1
        assert hist.bin_count == 16
        assert len(hist.counts) == 16
        assert len(hist.bin_edges) == 17
        assert sum(hist.counts) == 256 * 256
        assert hist.to_dict()["counts"] == hist.counts

    def test_nodata_excluded(self, nodata_tif):
        stats = BandStats(band=1, min=0.0, max=100.0, mean=50.0, std_dev=29.0)
        with RasterReader(nodata_tif) as reader:
            hist = compute_histogram(reader, 1, stats, bin_count=8)
        assert sum(hist.counts) == 200 * 100
