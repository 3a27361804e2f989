"""
Overview (pyramid level) selection.

Picks the reduced-resolution level to read for a tile so low zooms don't
pull full-resolution pixels and high zooms don't read blocky overviews.
"""

import math

from rastertiler.grid.mercator import EARTH_RADIUS_M

# Metres per pixel at zoom 0 for a 256 px tile, at the equator
ZOOM0_RESOLUTION = 2 * math.pi * EARTH_RADIUS_M / 256


def zoom_resolution(zoom: int, tile_size: int = 256) -> float:
    """
    Ground resolution of a tile pixel at the equator

    Halves with each zoom level.

    Examples:
        >>> round(zoom_resolution(0), 2)
        156543.03
        >>> round(zoom_resolution(10), 2)
        152.87
    """
    return ZOOM0_RESOLUTION * 256 / tile_size / (1 << zoom)


def overview_resolutions(base_resolution: float, factors: list[int]) -> list[float]:
    """Resolutions of overview levels given their decimation factors"""
    return [base_resolution * f for f in factors]


def select_overview(
    base_resolution: float,
    overview_resolutions: list[float],
    target_resolution: float,
    tolerance: float = 1.5,
) -> int | None:
    """
    Choose the level to read for a target resolution

    The full-resolution band is used when the target is not coarser than
    ``tolerance`` times the base resolution. Otherwise the overview closest
    to the target by absolute difference is chosen among those no coarser
    than ``tolerance`` times the target; ties go to the finer overview. When
    no overview qualifies the base band is read and resampled.

    Args:
        base_resolution: Full-resolution pixel size (same units as the rest)
        overview_resolutions: Pixel size of each overview level, any order
        target_resolution: Pixel size the output tile needs
        tolerance: Allowed coarseness ratio (>= 1.0)

    Returns:
        Index into ``overview_resolutions``, or None for the base band

    Examples:
        >>> select_overview(10.0, [20.0, 40.0, 80.0], 12.0) is None
        True
        >>> select_overview(10.0, [20.0, 40.0, 80.0], 45.0)
        1
    """
    if target_resolution <= base_resolution * tolerance:
        return None

    limit = target_resolution * tolerance
    best: int | None = None
    best_key: tuple[float, float] | None = None
    for index, resolution in enumerate(overview_resolutions):
        if resolution > limit:
            continue
        key = (abs(resolution - target_resolution), resolution)
        if best_key is None or key < best_key:
            best, best_key = index, key
    return best
