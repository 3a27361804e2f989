"""
rastertiler - XYZ PNG tiles from large raster datasets

Decimated, reprojected reads through rasterio, radiometric stretch, band
compositing and PNG encoding for interactive map viewers.

Quick Start:
    >>> import rastertiler as rt
    >>>
    >>> service = rt.TileService()
    >>> meta = service.open_dataset("./scene.tif")
    >>>
    >>> # Grayscale and RGB tiles (PNG bytes)
    >>> png = service.get_tile(meta.id, band=1, zoom=8, col=218, row=99)
    >>> png = service.get_rgb_tile(meta.id, [4, 3, 2], 8, 218, 99)
    >>>
    >>> # Explicit stretch
    >>> stretch = rt.StretchParams(min=0, max=3000, gamma=1.2)
    >>> png = service.get_tile(meta.id, 1, 8, 218, 99, stretch=stretch)
    >>>
    >>> service.close_dataset(meta.id)
"""

from rastertiler.catalog import BandStatistics, CachedDataset, DatasetCache
from rastertiler.core import (
    BandStats,
    ConfigError,
    DisplayMode,
    EncodedTile,
    EncodeError,
    ErrorKind,
    Histogram,
    InvalidRequestError,
    NotFoundError,
    OpenError,
    RasterMetadata,
    RasterTilerError,
    ReadError,
    StretchParams,
    TileAddress,
    TileError,
    TilerConfig,
    TileRequest,
)
from rastertiler.core.api import TileService
from rastertiler.io import inspect_raster
from rastertiler.tiles import TileExtractor, dispatch

__version__ = "0.1.0"

__all__ = [
    "BandStatistics",
    "BandStats",
    "CachedDataset",
    "ConfigError",
    "DatasetCache",
    "DisplayMode",
    "EncodeError",
    "EncodedTile",
    "ErrorKind",
    "Histogram",
    "InvalidRequestError",
    "NotFoundError",
    "OpenError",
    "RasterMetadata",
    "RasterTilerError",
    "ReadError",
    "StretchParams",
    "TileAddress",
    "TileError",
    "TileExtractor",
    "TileRequest",
    "TileService",
    "TilerConfig",
    "__version__",
    "dispatch",
    "inspect_raster",
]
