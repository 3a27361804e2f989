"""
Web Mercator Tile Math

Pure functions converting XYZ tile addresses to EPSG:3857 and EPSG:4326
bounding boxes, and bounding boxes to pixel windows inside a raster.
"""

import math
from typing import NamedTuple

from affine import Affine

from rastertiler.core.types import Bounds, TileAddress

# Half the side of the Web Mercator square in metres
ORIGIN_SHIFT = 20037508.342789244

# Latitude at which the Web Mercator square ends
MAX_LATITUDE = 85.0511287798066

# WGS84 equatorial radius in metres
EARTH_RADIUS_M = 6378137.0


class PixelWindow(NamedTuple):
    """Integer pixel window (col_off, row_off, width, height)"""

    col_off: int
    row_off: int
    width: int
    height: int

    def to_window(self):
        """Convert to a rasterio Window"""
        from rasterio.windows import Window

        return Window(self.col_off, self.row_off, self.width, self.height)


def tile_to_web_mercator_bounds(zoom: int, col: int, row: int) -> Bounds:
    """
    Get EPSG:3857 bounds of a tile

    Args:
        zoom: Zoom level
        col: Tile column (x), 0 at the antimeridian
        row: Tile row (y), 0 at the north edge

    Returns:
        (minx, miny, maxx, maxy) in metres

    Examples:
        >>> tile_to_web_mercator_bounds(0, 0, 0)
        (-20037508.342789244, -20037508.342789244, 20037508.342789244, 20037508.342789244)
    """
    tile_span = 2 * ORIGIN_SHIFT / (1 << zoom)

    min_x = -ORIGIN_SHIFT + col * tile_span
    max_y = ORIGIN_SHIFT - row * tile_span
    return (min_x, max_y - tile_span, min_x + tile_span, max_y)


def tile_to_geographic_bounds(zoom: int, col: int, row: int) -> Bounds:
    """
    Get EPSG:4326 bounds of a tile

    Latitudes are clamped to +/-MAX_LATITUDE.

    Returns:
        (lon_min, lat_min, lon_max, lat_max) in degrees

    Examples:
        >>> lon_min, lat_min, lon_max, lat_max = tile_to_geographic_bounds(1, 0, 0)
        >>> (lon_min, lat_min, lon_max, round(lat_max, 4))
        (-180.0, 0.0, 0.0, 85.0511)
    """
    n = 1 << zoom

    lon_min = col / n * 360.0 - 180.0
    lon_max = (col + 1) / n * 360.0 - 180.0
    lat_max = _row_edge_latitude(row, n)
    lat_min = _row_edge_latitude(row + 1, n)

    return (lon_min, lat_min, lon_max, lat_max)


def lonlat_to_tile(lon: float, lat: float, zoom: int) -> TileAddress:
    """
    Find the tile containing a point

    Points outside the Web Mercator square are clamped onto its edge tiles.

    Examples:
        >>> lonlat_to_tile(45.0, 45.0, 2)
        TileAddress(zoom=2, col=2, row=1)
    """
    n = 1 << zoom
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    lat_rad = math.radians(lat)

    x = (lon + 180.0) / 360.0 * n
    y = (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n

    col = min(n - 1, max(0, int(math.floor(x))))
    row = min(n - 1, max(0, int(math.floor(y))))
    return TileAddress(zoom=zoom, col=col, row=row)


def bounds_intersect(a: Bounds, b: Bounds) -> bool:
    """Closed-interval overlap test; boxes sharing an edge intersect"""
    return not (a[2] < b[0] or a[0] > b[2] or a[3] < b[1] or a[1] > b[3])


def geographic_to_pixel_window(
    transform: Affine,
    bounds: Bounds,
    width: int,
    height: int,
) -> PixelWindow | None:
    """
    Convert a bounding box to a pixel window clipped to the raster

    Args:
        transform: Raster affine transform (pixel -> native coordinates)
        bounds: (minx, miny, maxx, maxy) in the raster's native coordinates
        width: Raster width in pixels
        height: Raster height in pixels

    Returns:
        PixelWindow inside [0, width) x [0, height), or None when the box
        does not overlap the raster

    Examples:
        >>> from affine import Affine
        >>> t = Affine(0.1, 0, 0, 0, -0.1, 10)
        >>> geographic_to_pixel_window(t, (0, 5, 5, 10), 100, 100)
        PixelWindow(col_off=0, row_off=0, width=50, height=50)
    """
    inverse = ~transform
    minx, miny, maxx, maxy = bounds
    corners = [inverse * (x, y) for x in (minx, maxx) for y in (miny, maxy)]
    cols = [c for c, _ in corners]
    rows = [r for _, r in corners]

    col0 = max(0, math.floor(_snap(min(cols))))
    row0 = max(0, math.floor(_snap(min(rows))))
    col1 = min(width, math.ceil(_snap(max(cols))))
    row1 = min(height, math.ceil(_snap(max(rows))))

    if col1 <= col0 or row1 <= row0:
        return None
    return PixelWindow(col0, row0, col1 - col0, row1 - row0)


def window_bounds(transform: Affine, window: PixelWindow) -> Bounds:
    """Native-coordinate bounds of a pixel window"""
    x0, y0 = transform * (window.col_off, window.row_off)
    x1, y1 = transform * (window.col_off + window.width, window.row_off + window.height)
    return (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1))


def destination_rect(
    source_bounds: Bounds, tile_bounds: Bounds, tile_size: int
) -> PixelWindow | None:
    """
    Locate a source box inside a tile's pixel grid

    Rows are mapped linearly between the tile's bottom and top edges.

    Returns:
        PixelWindow in tile pixels, or None when nothing lands in the tile
    """
    t_minx, t_miny, t_maxx, t_maxy = tile_bounds
    span_x = t_maxx - t_minx
    span_y = t_maxy - t_miny

    col0 = (source_bounds[0] - t_minx) / span_x * tile_size
    col1 = (source_bounds[2] - t_minx) / span_x * tile_size
    row0 = (t_maxy - source_bounds[3]) / span_y * tile_size
    row1 = (t_maxy - source_bounds[1]) / span_y * tile_size

    col0 = max(0, int(round(col0)))
    row0 = max(0, int(round(row0)))
    col1 = min(tile_size, max(col0 + 1, int(round(col1))))
    row1 = min(tile_size, max(row0 + 1, int(round(row1))))

    if col1 <= col0 or row1 <= row0:
        return None
    return PixelWindow(col0, row0, col1 - col0, row1 - row0)


def _row_edge_latitude(row: int, n: int) -> float:
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * row / n))))
    return max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))


def _snap(value: float, eps: float = 1e-9) -> float:
    # Absorb float noise so exact pixel edges don't grow the window by one
    nearest = round(value)
    return float(nearest) if abs(value - nearest) < eps else value
