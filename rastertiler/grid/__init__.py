"""
rastertiler Grid Module

XYZ tile math and the synthetic pixel coordinate space.
"""

from rastertiler.grid.mercator import (
    MAX_LATITUDE,
    ORIGIN_SHIFT,
    PixelWindow,
    bounds_intersect,
    destination_rect,
    geographic_to_pixel_window,
    lonlat_to_tile,
    tile_to_geographic_bounds,
    tile_to_web_mercator_bounds,
    window_bounds,
)
from rastertiler.grid.pixel_space import PixelSpace

__all__ = [
    "MAX_LATITUDE",
    "ORIGIN_SHIFT",
    "PixelSpace",
    "PixelWindow",
    "bounds_intersect",
    "destination_rect",
    "geographic_to_pixel_window",
    "lonlat_to_tile",
    "tile_to_geographic_bounds",
    "tile_to_web_mercator_bounds",
    "window_bounds",
]
