"""
Tile extraction pipeline.

Turns a tile address into an encoded RGBA PNG for one display mode:

    tile bounds -> intersection test -> overview selection -> pixel window
    -> decimated read (+ warp to EPSG:3857) -> stretch -> composite -> PNG

Tiles that miss a dataset resolve to the transparent tile, not an error.
Every read goes through a RasterReader opened for that call only.
"""

import logging
import math

import numpy as np
from numpy.typing import NDArray
from rasterio.errors import RasterioError
from rasterio.transform import from_bounds
from rasterio.warp import transform_bounds

from rastertiler._internal.codecs import empty_tile, encode_tile
from rastertiler.catalog.dataset_cache import CachedDataset
from rastertiler.catalog.statistics import compute_band_stats
from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import InvalidRequestError, ReadError
from rastertiler.core.types import (
    BandStats,
    Bounds,
    EncodedTile,
    RasterMetadata,
    StretchParams,
    TileAddress,
)
from rastertiler.grid.mercator import (
    bounds_intersect,
    destination_rect,
    geographic_to_pixel_window,
    tile_to_geographic_bounds,
    tile_to_web_mercator_bounds,
    window_bounds,
)
from rastertiler.grid.pixel_space import PixelSpace
from rastertiler.io.metadata import inspect_raster
from rastertiler.io.overview import select_overview, zoom_resolution
from rastertiler.io.reader import WEB_MERCATOR, WGS84, RasterReader
from rastertiler.render.stretch import render_grayscale, render_rgb

logger = logging.getLogger(__name__)


class TileExtractor:
    """
    Renders tiles from registered datasets

    Stateless apart from its configuration; safe to share between threads.

    Args:
        config: Tile size, resampling, overview tolerance and pixel scale

    Examples:
        >>> extractor = TileExtractor()
        >>> tile = extractor.extract_tile(cache.get(dataset_id), 1, TileAddress(2, 2, 1))
        >>> tile.is_empty
        False
    """

    def __init__(self, config: TilerConfig | None = None):
        self.config = config or TilerConfig()

    # ------------------------------------------------------------------
    # Georeferenced modes
    # ------------------------------------------------------------------

    def extract_tile(
        self,
        source: CachedDataset,
        band: int,
        address: TileAddress,
        stretch: StretchParams | None = None,
        tile_size: int | None = None,
    ) -> EncodedTile:
        """
        Single-band grayscale tile in Web Mercator

        Args:
            source: Registered dataset
            band: Band index (1-based)
            address: Tile address
            stretch: Explicit stretch (default: band min/max, gamma 1)
            tile_size: Output edge in pixels (default: config.tile_size)

        Returns:
            EncodedTile; ``is_empty`` when the tile misses the dataset
        """
        size = self._tile_size(tile_size)
        meta = self._metadata(source)
        self._check_georeferenced(meta)
        meta.check_band(band)
        if stretch is not None:
            stretch.validate()

        values = self._read_georeferenced(meta, [band], address, size)
        if values is None:
            return empty_tile(size)

        stretch = self._resolve_stretch(meta, band, stretch)
        return encode_tile(render_grayscale(values[0], stretch, meta.nodata))

    def extract_rgb_tile(
        self,
        source: CachedDataset,
        bands: list[int],
        address: TileAddress,
        stretches: list[StretchParams | None] | None = None,
        tile_size: int | None = None,
    ) -> EncodedTile:
        """Three bands of one dataset composited as R, G, B"""
        size = self._tile_size(tile_size)
        meta = self._metadata(source)
        self._check_georeferenced(meta)
        bands = _three("bands", bands)
        stretches = _three_stretches(stretches)
        for band in bands:
            meta.check_band(band)

        values = self._read_georeferenced(meta, bands, address, size)
        if values is None:
            return empty_tile(size)

        resolved = [self._resolve_stretch(meta, b, s) for b, s in zip(bands, stretches)]
        rgba = render_rgb(list(values), resolved, [meta.nodata] * 3)
        return encode_tile(rgba)

    def extract_cross_layer_rgb_tile(
        self,
        sources: list[CachedDataset],
        bands: list[int],
        address: TileAddress,
        stretches: list[StretchParams | None] | None = None,
        tile_size: int | None = None,
    ) -> EncodedTile:
        """
        One band from each of three datasets composited as R, G, B

        Each channel is read and warped on its own, so the datasets may have
        different extents, resolutions and CRS. A channel whose dataset does
        not cover the tile stays empty.
        """
        size = self._tile_size(tile_size)
        metas = [self._metadata(s) for s in _three("datasets", sources)]
        for meta in metas:
            self._check_georeferenced(meta)
        return self._cross_layer(
            metas,
            _three("bands", bands),
            _three_stretches(stretches),
            size,
            lambda meta, band: self._read_georeferenced(meta, [band], address, size),
        )

    # ------------------------------------------------------------------
    # Pixel modes (synthetic coordinates, no reprojection)
    # ------------------------------------------------------------------

    def extract_pixel_tile(
        self,
        source: CachedDataset,
        band: int,
        address: TileAddress,
        stretch: StretchParams | None = None,
        tile_size: int | None = None,
    ) -> EncodedTile:
        """
        Single-band grayscale tile in the synthetic pixel space

        The image is placed at ``config.pixel_scale`` degrees per pixel,
        centred on the origin; any geotransform it has is ignored.
        """
        size = self._tile_size(tile_size)
        meta = self._metadata(source)
        meta.check_band(band)
        if stretch is not None:
            stretch.validate()

        values = self._read_pixel_space(meta, [band], address, size)
        if values is None:
            return empty_tile(size)

        stretch = self._resolve_stretch(meta, band, stretch)
        return encode_tile(render_grayscale(values[0], stretch, meta.nodata))

    def extract_cross_layer_pixel_rgb_tile(
        self,
        sources: list[CachedDataset],
        bands: list[int],
        address: TileAddress,
        stretches: list[StretchParams | None] | None = None,
        tile_size: int | None = None,
    ) -> EncodedTile:
        """Pixel-space equivalent of extract_cross_layer_rgb_tile"""
        size = self._tile_size(tile_size)
        metas = [self._metadata(s) for s in _three("datasets", sources)]
        return self._cross_layer(
            metas,
            _three("bands", bands),
            _three_stretches(stretches),
            size,
            lambda meta, band: self._read_pixel_space(meta, [band], address, size),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read_georeferenced(
        self,
        meta: RasterMetadata,
        bands: list[int],
        address: TileAddress,
        size: int,
    ) -> NDArray[np.float64] | None:
        """
        Read bands warped onto the tile's EPSG:3857 grid

        Returns:
            (len(bands), size, size) float64 array, or None if the tile
            does not overlap the dataset
        """
        tile_geo = tile_to_geographic_bounds(address.zoom, address.col, address.row)
        if not bounds_intersect(tile_geo, meta.bounds):
            return None

        center_lat = (tile_geo[1] + tile_geo[3]) / 2.0
        target = zoom_resolution(address.zoom, size) * math.cos(math.radians(center_lat))
        level = select_overview(
            meta.resolution,
            meta.overview_resolutions,
            target,
            self.config.overview_tolerance,
        )

        with RasterReader(meta.path, level) as reader:
            reader.check_bands(bands)
            src_bounds = self._source_bounds(reader, _clip(tile_geo, meta.bounds))
            window = geographic_to_pixel_window(
                reader.transform, src_bounds, reader.width, reader.height
            )
            if window is None:
                return None

            logger.debug(
                "Tile %s of %s: overview %s, window %s",
                address,
                meta.id,
                level,
                tuple(window),
            )
            mercator = tile_to_web_mercator_bounds(address.zoom, address.col, address.row)
            return reader.read_warped(
                bands,
                from_bounds(*mercator, size, size),
                (size, size),
                WEB_MERCATOR,
                self.config.resampling_method,
            )

    def _read_pixel_space(
        self,
        meta: RasterMetadata,
        bands: list[int],
        address: TileAddress,
        size: int,
    ) -> NDArray[np.float64] | None:
        """
        Read bands from the synthetic pixel space into a tile-sized buffer

        The covered part of the tile is located with destination_rect and
        read at that size; the rest of the tile stays NaN.
        """
        space = PixelSpace(meta.width, meta.height, self.config.pixel_scale)
        tile_geo = tile_to_geographic_bounds(address.zoom, address.col, address.row)
        if not bounds_intersect(tile_geo, space.bounds):
            return None

        target = (tile_geo[2] - tile_geo[0]) / size
        level = select_overview(
            space.scale,
            [space.scale * f for f in meta.overview_factors],
            target,
            self.config.overview_tolerance,
        )

        with RasterReader(meta.path, level) as reader:
            reader.check_bands(bands)
            transform = space.transform_for(reader.width, reader.height)
            window = geographic_to_pixel_window(transform, tile_geo, reader.width, reader.height)
            if window is None:
                return None
            rect = destination_rect(window_bounds(transform, window), tile_geo, size)
            if rect is None:
                return None

            logger.debug(
                "Pixel tile %s of %s: overview %s, window %s -> %s",
                address,
                meta.id,
                level,
                tuple(window),
                tuple(rect),
            )
            data = reader.read(
                bands, window, (rect.height, rect.width), self.config.resampling_method
            )

        tile = np.full((len(bands), size, size), np.nan, dtype=np.float64)
        tile[
            :,
            rect.row_off : rect.row_off + rect.height,
            rect.col_off : rect.col_off + rect.width,
        ] = data
        return tile

    def _source_bounds(self, reader: RasterReader, geo_bounds: Bounds) -> Bounds:
        src_crs = reader.source_crs()
        if src_crs == WGS84:
            return geo_bounds
        try:
            return tuple(transform_bounds(WGS84, src_crs, *geo_bounds, densify_pts=21))
        except (RasterioError, ValueError) as e:
            raise ReadError(f"Failed to transform tile bounds into {src_crs}: {e}") from e

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cross_layer(self, metas, bands, stretches, size, read) -> EncodedTile:
        for meta, band in zip(metas, bands):
            meta.check_band(band)

        channels = [read(meta, band) for meta, band in zip(metas, bands)]
        if all(c is None for c in channels):
            return empty_tile(size)

        resolved = [
            self._resolve_stretch(meta, band, stretch) if values is not None else StretchParams()
            for meta, band, stretch, values in zip(metas, bands, stretches, channels)
        ]
        rgba = render_rgb(
            [c[0] if c is not None else None for c in channels],
            resolved,
            [meta.nodata for meta in metas],
            shape=(size, size),
        )
        return encode_tile(rgba)

    def _resolve_stretch(
        self, meta: RasterMetadata, band: int, stretch: StretchParams | None
    ) -> StretchParams:
        if stretch is not None:
            return stretch.validate()
        return StretchParams.from_stats(self._band_stats(meta, band))

    def _band_stats(self, meta: RasterMetadata, band: int) -> BandStats:
        if meta.statistics is not None:
            return meta.statistics.get(band)
        # Unregistered metadata: compute without caching
        with RasterReader(meta.path) as reader:
            return compute_band_stats(
                reader,
                band,
                self.config.stats_sample_size,
                self.config.stats_resampling_method,
            )

    def _metadata(self, source: CachedDataset) -> RasterMetadata:
        if source.metadata is not None:
            return source.metadata
        return inspect_raster(source.path, source.id)

    def _tile_size(self, tile_size: int | None) -> int:
        size = self.config.tile_size if tile_size is None else tile_size
        if size <= 0:
            raise InvalidRequestError(f"Tile size must be positive, got {size}")
        return size

    @staticmethod
    def _check_georeferenced(meta: RasterMetadata) -> None:
        if not meta.is_georeferenced:
            raise InvalidRequestError(
                f"Dataset {meta.id} is not georeferenced; request it in a pixel mode"
            )


def _clip(a: Bounds, b: Bounds) -> Bounds:
    return (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))


def _three(name: str, items: list) -> list:
    items = list(items)
    if len(items) != 3:
        raise InvalidRequestError(f"Expected 3 {name}, got {len(items)}")
    return items


def _three_stretches(stretches: list[StretchParams | None] | None) -> list[StretchParams | None]:
    if not stretches:
        return [None, None, None]
    stretches = _three("stretches", stretches)
    for stretch in stretches:
        if stretch is not None:
            stretch.validate()
    return stretches
