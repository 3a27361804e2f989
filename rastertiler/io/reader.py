"""
Request-scoped raster reader using Rasterio

A rasterio dataset handle must not be shared between threads, so every
tile request opens its own RasterReader from the cached path and closes it
when the request is done.
"""

import logging
import math

import numpy as np
import rasterio
from affine import Affine
from numpy.typing import NDArray
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.errors import RasterioError
from rasterio.vrt import WarpedVRT
from rasterio.warp import transform_bounds

from rastertiler.core.exceptions import InvalidRequestError, OpenError, ReadError
from rastertiler.core.types import Bounds
from rastertiler.grid.mercator import PixelWindow

logger = logging.getLogger(__name__)

WGS84 = CRS.from_epsg(4326)
WEB_MERCATOR = CRS.from_epsg(3857)

# Metres per degree of latitude (and of longitude at the equator)
METERS_PER_DEGREE = 111320.0


class RasterReader:
    """
    Short-lived raster reader

    Wraps a rasterio dataset opened for the duration of one request, at full
    resolution or at a given overview level.

    Attributes:
        path: Path to the raster file
        overview_level: Overview index the handle was opened at (None = base)
        dataset: Rasterio dataset handle

    Examples:
        >>> with RasterReader("scene.tif") as reader:
        ...     bounds = reader.get_bounds()
        ...     data = reader.read([1], out_shape=(256, 256))
    """

    def __init__(self, path: str, overview_level: int | None = None):
        """
        Open a raster with Rasterio

        Args:
            path: Path or GDAL URI of the raster
            overview_level: Open this overview instead of the base level

        Raises:
            OpenError: If the file is missing, unreadable or unsupported
        """
        self.path = path
        self.overview_level = overview_level
        try:
            if overview_level is None:
                self.dataset = rasterio.open(path, "r")
            else:
                self.dataset = rasterio.open(path, "r", overview_level=overview_level)
        except (RasterioError, OSError) as e:
            raise OpenError(f"Failed to open raster {path}: {e}") from e

    @property
    def width(self) -> int:
        return self.dataset.width

    @property
    def height(self) -> int:
        return self.dataset.height

    @property
    def count(self) -> int:
        return self.dataset.count

    @property
    def transform(self) -> Affine:
        return self.dataset.transform

    @property
    def crs(self) -> CRS | None:
        return self.dataset.crs

    @property
    def nodata(self) -> float | None:
        return self.dataset.nodata

    def is_georeferenced(self) -> bool:
        """
        Check for real georeferencing

        A raster counts as georeferenced when it has a CRS, or when its
        geotransform is anything other than the identity GDAL reports for
        plain images (a y pixel size of +1 or -1 both count as identity).
        """
        if self.crs is not None:
            return True

        t = self.transform
        is_identity = (
            abs(t.c) < 1e-10
            and abs(t.a - 1.0) < 1e-10
            and abs(t.b) < 1e-10
            and abs(t.f) < 1e-10
            and abs(t.d) < 1e-10
            and (abs(t.e + 1.0) < 1e-10 or abs(t.e - 1.0) < 1e-10)
        )
        return not is_identity

    def native_bounds(self) -> Bounds:
        """Bounds in the raster's own coordinates"""
        left, bottom, right, top = self.dataset.bounds
        return (min(left, right), min(bottom, top), max(left, right), max(bottom, top))

    def source_crs(self) -> CRS:
        """CRS used for warping; rasters without one are taken as WGS84"""
        return self.crs if self.crs is not None else WGS84

    def get_bounds(self, target_crs: str | CRS = WGS84) -> Bounds:
        """
        Get bounds in a target CRS

        Args:
            target_crs: Target coordinate system (default: WGS84)

        Returns:
            Tuple of (minx, miny, maxx, maxy) in target CRS
        """
        native = self.native_bounds()
        if self.crs is None:
            # Assume WGS84 if no CRS
            return native
        if CRS.from_user_input(target_crs) == self.crs:
            return native

        try:
            return tuple(transform_bounds(self.crs, target_crs, *native, densify_pts=21))
        except Exception as e:
            raise ReadError(f"Failed to transform bounds of {self.path}: {e}") from e

    def get_resolution(self) -> float:
        """
        Get pixel resolution in meters

        Returns:
            Pixel resolution in meters (approximate)

        Notes:
            - For projected CRS: uses transform directly
            - For geographic CRS: converts degrees to meters at image center
            - Returns average of x and y resolutions
        """
        pixel_size_x = abs(self.transform.a)
        pixel_size_y = abs(self.transform.e)

        if self.crs is not None and self.crs.is_projected:
            # Already in meters
            return (pixel_size_x + pixel_size_y) / 2.0

        # Geographic CRS (degrees) - convert to meters at image center
        _, bottom, _, top = self.native_bounds()
        center_lat = max(-89.0, min(89.0, (bottom + top) / 2.0))
        meters_x = pixel_size_x * METERS_PER_DEGREE * math.cos(math.radians(center_lat))
        meters_y = pixel_size_y * METERS_PER_DEGREE
        return (meters_x + meters_y) / 2.0

    def overview_factors(self, band: int = 1) -> list[int]:
        """Decimation factors of the band's overviews, finest first"""
        return sorted(self.dataset.overviews(band))

    def check_bands(self, indexes: list[int]) -> None:
        for band in indexes:
            if not 1 <= band <= self.count:
                raise InvalidRequestError(
                    f"Band {band} out of range for {self.path} (1..{self.count})"
                )

    def read(
        self,
        indexes: list[int],
        window: PixelWindow | None = None,
        out_shape: tuple[int, int] | None = None,
        resampling: Resampling = Resampling.nearest,
    ) -> NDArray[np.float64]:
        """
        Decimated, masked read of one or more bands

        Args:
            indexes: Band indexes (1-based)
            window: Pixel window to read (default: whole level)
            out_shape: (rows, cols) of the output buffer; the read is
                       resampled to this size by GDAL
            resampling: Resampling used when out_shape differs from window

        Returns:
            float64 array of shape (len(indexes), rows, cols); masked and
            nodata pixels are NaN

        Raises:
            ReadError: If the read fails
        """
        self.check_bands(indexes)
        kwargs = {"masked": True, "resampling": resampling}
        if window is not None:
            kwargs["window"] = window.to_window()
        if out_shape is not None:
            kwargs["out_shape"] = (len(indexes), out_shape[0], out_shape[1])

        try:
            data = self.dataset.read(indexes, **kwargs)
        except Exception as e:
            raise ReadError(f"Failed to read {self.path} bands {indexes}: {e}") from e

        values = np.ma.filled(data.astype(np.float64), np.nan)
        values[~np.isfinite(values)] = np.nan
        return values

    def read_warped(
        self,
        indexes: list[int],
        dst_transform: Affine,
        dst_shape: tuple[int, int],
        dst_crs: CRS = WEB_MERCATOR,
        resampling: Resampling = Resampling.nearest,
    ) -> NDArray[np.float64]:
        """
        Read bands reprojected onto a destination grid

        Warps through a WarpedVRT over the open dataset, so GDAL reads only
        the source blocks the destination grid needs and keeps the dataset's
        own georeferencing.

        Args:
            indexes: Band indexes (1-based)
            dst_transform: Affine transform of the destination grid
            dst_shape: (rows, cols) of the destination grid
            dst_crs: Destination CRS (default: EPSG:3857)
            resampling: Resampling for the warp

        Returns:
            float64 array of shape (len(indexes), rows, cols), NaN where the
            source has no data
        """
        self.check_bands(indexes)
        rows, cols = dst_shape

        try:
            with WarpedVRT(
                self.dataset,
                src_crs=self.source_crs(),
                src_nodata=self.nodata,
                crs=dst_crs,
                transform=dst_transform,
                width=cols,
                height=rows,
                nodata=np.nan,
                dtype="float64",
                resampling=resampling,
            ) as vrt:
                values = vrt.read(indexes)
        except Exception as e:
            raise ReadError(f"Failed to reproject {self.path}: {e}") from e

        values = values.astype(np.float64, copy=False)
        values[~np.isfinite(values)] = np.nan
        logger.debug("Warped %s bands %s onto %dx%d grid", self.path, indexes, cols, rows)
        return values

    def sample(
        self,
        band: int,
        max_size: int = 1024,
        resampling: Resampling = Resampling.nearest,
    ) -> NDArray[np.float64]:
        """
        Read a whole band decimated so neither side exceeds max_size

        Returns:
            2D float64 array, NaN where masked
        """
        scale = min(1.0, max_size / max(self.width, self.height))
        shape = (max(1, int(self.height * scale)), max(1, int(self.width * scale)))
        return self.read([band], out_shape=shape, resampling=resampling)[0]

    def close(self):
        """Close file handle"""
        if self.dataset is not None:
            self.dataset.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    def __repr__(self) -> str:
        """String representation"""
        if self.dataset.closed:
            return f"<RasterReader (closed): {self.path}>"
        return (
            f"<RasterReader: {self.path}>\n"
            f"  Size: {self.width} x {self.height}\n"
            f"  Bands: {self.count}\n"
            f"  CRS: {self.crs}"
        )
