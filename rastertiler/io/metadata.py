"""
Raster metadata extraction.

Read the header of a raster (size, bands, CRS, bounds, overviews) without
loading pixel data, and build the RasterMetadata registered for a dataset.
"""

import logging
import uuid
from pathlib import Path

from rastertiler.core.types import RasterMetadata
from rastertiler.io.reader import WGS84, RasterReader

logger = logging.getLogger(__name__)


def inspect_raster(path: str, dataset_id: str | None = None) -> RasterMetadata:
    """
    Extract metadata from a raster file without reading pixel data.

    Georeferenced rasters report EPSG:4326 bounds (rasters with a real
    geotransform but no CRS are taken to be in degrees already). Plain
    images report pixel bounds ``(0, 0, width, height)`` and a resolution
    of one unit per pixel.

    Args:
        path: Path to a GeoTIFF/COG or any GDAL-readable raster
        dataset_id: Identifier to assign (default: a new UUID4)

    Returns:
        RasterMetadata with statistics not yet attached

    Raises:
        OpenError: If the file cannot be opened

    Examples:
        >>> meta = inspect_raster("./scene.tif")
        >>> meta.band_count, meta.is_georeferenced
        (4, True)
    """
    path = str(path)
    with RasterReader(path) as reader:
        georeferenced = reader.is_georeferenced()
        native = reader.native_bounds()

        if georeferenced:
            bounds = reader.get_bounds(WGS84)
            pixel_size = (abs(reader.transform.a), abs(reader.transform.e))
            resolution = reader.get_resolution()
        else:
            bounds = (0.0, 0.0, float(reader.width), float(reader.height))
            pixel_size = (1.0, 1.0)
            resolution = 1.0

        metadata = RasterMetadata(
            id=dataset_id or str(uuid.uuid4()),
            path=path,
            width=reader.width,
            height=reader.height,
            band_count=reader.count,
            bounds=tuple(float(v) for v in bounds),
            native_bounds=tuple(float(v) for v in native),
            projection=reader.crs.to_wkt() if reader.crs is not None else "",
            pixel_size=pixel_size,
            resolution=resolution,
            overview_factors=reader.overview_factors(),
            nodata=reader.nodata,
            dtype=str(reader.dataset.dtypes[0]),
            is_georeferenced=georeferenced,
        )

    logger.debug(
        "Inspected %s: %dx%d, %d band(s), georeferenced=%s, overviews=%s",
        Path(path).name,
        metadata.width,
        metadata.height,
        metadata.band_count,
        georeferenced,
        metadata.overview_factors,
    )
    return metadata
