"""
rastertiler I/O Module

Request-scoped raster reading, metadata extraction and overview selection.
"""

from rastertiler.io.metadata import inspect_raster
from rastertiler.io.overview import select_overview, zoom_resolution
from rastertiler.io.reader import RasterReader

__all__ = ["RasterReader", "inspect_raster", "select_overview", "zoom_resolution"]
