"""
Tests for overview selection
"""

import math

import pytest

from rastertiler.io.overview import (
    overview_resolutions,
    select_overview,
    zoom_resolution,
)


class TestZoomResolution:
    """Test zoom_resolution"""

    def test_zoom_zero(self):
        assert zoom_resolution(0) == pytest.approx(2 * math.pi * 6378137 / 256)

    def test_halves_per_zoom(self):
        for zoom in range(20):
            assert zoom_resolution(zoom + 1) == pytest.approx(zoom_resolution(zoom) / 2)

    def test_larger_tiles_are_finer(self):
        assert zoom_resolution(5, tile_size=512) == pytest.approx(zoom_resolution(5) / 2)


class TestSelectOverview:
    """Test select_overview"""

    BASE = 10.0
    OVERVIEWS = overview_resolutions(10.0, [2, 4, 8, 16])  # 20, 40, 80, 160

    def test_overview_resolutions(self):
        assert self.OVERVIEWS == [20.0, 40.0, 80.0, 160.0]

    def test_base_when_target_is_fine(self):
        """No overview once the base satisfies the target"""
        assert select_overview(self.BASE, self.OVERVIEWS, 5.0) is None
        assert select_overview(self.BASE, self.OVERVIEWS, 10.0) is None
        assert select_overview(self.BASE, self.OVERVIEWS, 15.0) is None

    def test_closest_overview(self):
        assert select_overview(self.BASE, self.OVERVIEWS, 20.0) == 0
        assert select_overview(self.BASE, self.OVERVIEWS, 45.0) == 1
        assert select_overview(self.BASE, self.OVERVIEWS, 150.0) == 3

    def test_coarsest_when_target_is_very_coarse(self):
        assert select_overview(self.BASE, self.OVERVIEWS, 100000.0) == 3

    def test_tie_goes_to_finer(self):
        """30 is equally far from 20 and 40"""
        assert select_overview(self.BASE, self.OVERVIEWS, 30.0) == 0

    def test_unsorted_overviews(self):
        assert select_overview(self.BASE, [160.0, 20.0, 80.0, 40.0], 45.0) == 3

    def test_no_overviews_falls_back_to_base(self):
        assert select_overview(self.BASE, [], 1000.0) is None

    def test_no_qualifying_overview_falls_back_to_base(self):
        """Every overview is much coarser than the target"""
        assert select_overview(1.0, [100.0, 200.0], 2.0) is None

    def test_monotonic_in_zoom(self):
        """Zooming in never picks a coarser level"""

        def level_resolution(choice):
            return self.BASE if choice is None else self.OVERVIEWS[choice]

        previous = math.inf
        for zoom in range(0, 24):
            choice = select_overview(self.BASE, self.OVERVIEWS, zoom_resolution(zoom))
            resolution = level_resolution(choice)
            assert resolution <= previous
            previous = resolution

    def test_tolerance(self):
        assert select_overview(self.BASE, self.OVERVIEWS, 18.0, tolerance=2.0) is None
        assert select_overview(self.BASE, self.OVERVIEWS, 18.0, tolerance=1.5) == 0
