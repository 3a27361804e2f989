"""
Display-mode routing.

Maps a TileRequest onto exactly one TileExtractor entry point and makes
sure every failure leaves as a TileError.
"""

import logging
from dataclasses import replace

from rasterio.errors import RasterioError

from rastertiler.catalog.dataset_cache import CachedDataset, DatasetCache
from rastertiler.core.exceptions import (
    InvalidRequestError,
    NotFoundError,
    ReadError,
    TileError,
)
from rastertiler.core.types import DisplayMode, EncodedTile, TileRequest
from rastertiler.tiles.extractor import TileExtractor

logger = logging.getLogger(__name__)


def resolve_dataset(cache: DatasetCache, dataset_id: str) -> CachedDataset:
    """Look up a registered dataset or raise NotFoundError"""
    entry = cache.get(dataset_id)
    if entry is None:
        raise NotFoundError(f"Dataset {dataset_id!r} is not open")
    return entry


def dispatch(extractor: TileExtractor, cache: DatasetCache, request: TileRequest) -> EncodedTile:
    """
    Render one tile request

    Args:
        extractor: Tile pipeline
        cache: Registry the request's dataset ids are resolved against
        request: Tile request

    Returns:
        EncodedTile (the transparent tile when nothing intersects)

    Raises:
        TileError: NotFoundError, OpenError, ReadError, EncodeError or
                   InvalidRequestError; other exceptions are bugs and propagate
    """
    try:
        return _route(extractor, cache, request)
    except TileError as e:
        logger.debug("Tile %s failed (%s): %s", request.address, e.kind.value, e)
        raise
    except RasterioError as e:
        raise ReadError(f"Raster error rendering tile {request.address}: {e}") from e
    except OSError as e:
        raise ReadError(f"I/O error rendering tile {request.address}: {e}") from e
    except ValueError as e:
        raise InvalidRequestError(f"Invalid tile request {request.address}: {e}") from e


def _route(extractor: TileExtractor, cache: DatasetCache, request: TileRequest) -> EncodedTile:
    try:
        mode = DisplayMode(request.mode)
    except ValueError:
        raise InvalidRequestError(f"Unknown display mode: {request.mode!r}") from None
    if mode is not request.mode:
        request = replace(request, mode=mode)

    request.validate()
    sources = [resolve_dataset(cache, dataset_id) for dataset_id in request.dataset_ids]
    bands = list(request.bands)
    stretches = list(request.stretches) or None
    address = request.address
    size = request.tile_size

    if mode is DisplayMode.GRAYSCALE:
        return extractor.extract_tile(sources[0], bands[0], address, request.stretch_for(0), size)
    elif mode is DisplayMode.RGB:
        return extractor.extract_rgb_tile(sources[0], bands, address, stretches, size)
    elif mode is DisplayMode.CROSS_LAYER_RGB:
        return extractor.extract_cross_layer_rgb_tile(sources, bands, address, stretches, size)
    elif mode is DisplayMode.PIXEL_GRAYSCALE:
        return extractor.extract_pixel_tile(
            sources[0], bands[0], address, request.stretch_for(0), size
        )
    elif mode is DisplayMode.PIXEL_CROSS_LAYER_RGB:
        return extractor.extract_cross_layer_pixel_rgb_tile(
            sources, bands, address, stretches, size
        )
    else:
        raise InvalidRequestError(f"Unsupported display mode: {mode!r}")
