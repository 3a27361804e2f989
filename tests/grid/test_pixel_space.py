"""
Tests for the synthetic pixel coordinate space
"""

import pytest

from rastertiler.grid.mercator import PixelWindow, geographic_to_pixel_window
from rastertiler.grid.pixel_space import MAX_HALF_HEIGHT, PixelSpace


class TestPixelSpace:
    """Test PixelSpace geometry"""

    def test_centered_bounds(self):
        """Images are centred on the origin at 0.01 degrees per pixel"""
        space = PixelSpace(1000, 500)
        assert space.bounds == pytest.approx((-5.0, -2.5, 5.0, 2.5))

    def test_custom_scale(self):
        space = PixelSpace(100, 100, scale=0.1)
        assert space.bounds == pytest.approx((-5.0, -5.0, 5.0, 5.0))

    def test_tall_image_is_clamped(self):
        """Half height never exceeds 85 degrees; rows are squeezed instead"""
        space = PixelSpace(100, 20000)
        assert space.half_height == MAX_HALF_HEIGHT
        assert space.y_scale == pytest.approx(170.0 / 20000)
        assert space.y_scale < space.scale

    def test_transform_maps_corners(self):
        space = PixelSpace(400, 200)
        transform = space.transform_for()
        assert transform * (0, 0) == pytest.approx((-2.0, 1.0))
        assert transform * (400, 200) == pytest.approx((2.0, -1.0))

    def test_overview_transform_covers_same_bounds(self):
        """A decimated level spans the same synthetic extent"""
        space = PixelSpace(400, 200)
        transform = space.transform_for(100, 50)
        assert transform.a == pytest.approx(0.04)
        assert transform * (100, 50) == pytest.approx((2.0, -1.0))

    def test_window_for_whole_image(self):
        space = PixelSpace(400, 200)
        window = geographic_to_pixel_window(space.transform_for(), space.bounds, 400, 200)
        assert window == PixelWindow(0, 0, 400, 200)

    def test_window_for_quadrant(self):
        space = PixelSpace(400, 200)
        window = geographic_to_pixel_window(space.transform_for(), (0, 0, 2, 1), 400, 200)
        assert window == PixelWindow(200, 0, 200, 100)
