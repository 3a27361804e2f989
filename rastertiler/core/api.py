"""
rastertiler Public API

TileService is the boundary the host application talks to: open and close
datasets, fetch PNG tiles for every display mode, and query band
statistics and histograms.

The dataset registry is an explicit object owned by the caller and passed
in (or built from the config), never module-level state.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from rastertiler.catalog.dataset_cache import DatasetCache
from rastertiler.catalog.statistics import BandStatistics, compute_histogram
from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import InvalidRequestError, NotFoundError, TileError
from rastertiler.core.types import (
    BandStats,
    DisplayMode,
    EncodedTile,
    Histogram,
    RasterMetadata,
    StretchParams,
    TileAddress,
    TileRequest,
)
from rastertiler.io.metadata import inspect_raster
from rastertiler.io.reader import RasterReader
from rastertiler.tiles.dispatch import dispatch, resolve_dataset
from rastertiler.tiles.extractor import TileExtractor

logger = logging.getLogger(__name__)


class TileService:
    """
    Tile and dataset operations for a map viewer

    Safe to call from many threads at once. Each tile opens its own raster
    handle from the registered path, so closing a dataset never disturbs
    tiles already being rendered.

    Args:
        cache: Dataset registry (default: new DatasetCache sized by config)
        config: Tiler settings (default: TilerConfig())

    Examples:
        >>> from rastertiler import TileService
        >>> service = TileService()
        >>> meta = service.open_dataset("scene.tif")
        >>> png = service.get_tile(meta.id, band=1, zoom=2, col=2, row=1)
        >>> png[:4]
        b'\\x89PNG'
        >>> service.close_dataset(meta.id)
    """

    def __init__(self, cache: DatasetCache | None = None, config: TilerConfig | None = None):
        self.config = config or TilerConfig()
        self.cache = cache if cache is not None else DatasetCache(self.config.cache_capacity)
        self.extractor = TileExtractor(self.config)

    # ------------------------------------------------------------------
    # Dataset lifecycle
    # ------------------------------------------------------------------

    def open_dataset(self, path: str) -> RasterMetadata:
        """
        Open a raster, compute its metadata and register it

        Band statistics are computed here when ``config.compute_stats_on_open``
        is set, otherwise on first use.

        Args:
            path: Path or GDAL URI of the raster

        Returns:
            RasterMetadata with a fresh dataset id

        Raises:
            OpenError: If the raster cannot be opened
            ReadError: If metadata or statistics cannot be read
        """
        meta = self._describe(str(path))

        if self.config.compute_stats_on_open:
            with RasterReader(meta.path) as reader:
                for band in range(1, meta.band_count + 1):
                    meta.statistics.get(band, reader)

        self.cache.put(meta.id, meta.path, meta)
        logger.info(
            "Opened dataset %s: %s (%dx%d, %d band(s), georeferenced=%s)",
            meta.id,
            meta.path,
            meta.width,
            meta.height,
            meta.band_count,
            meta.is_georeferenced,
        )
        return meta

    def close_dataset(self, dataset_id: str) -> None:
        """
        Unregister a dataset

        Raises:
            NotFoundError: If the id is not registered
        """
        if not self.cache.remove(dataset_id):
            raise NotFoundError(f"Dataset {dataset_id!r} is not open")
        logger.info("Closed dataset %s", dataset_id)

    def get_metadata(self, dataset_id: str) -> RasterMetadata:
        """Metadata of a registered dataset"""
        entry = resolve_dataset(self.cache, dataset_id)
        if entry.metadata is not None and entry.metadata.statistics is not None:
            return entry.metadata

        # Registered by the host without metadata; a concurrent close wins
        meta = self._describe(entry.path, entry.id)
        if not self.cache.update(entry.id, meta):
            logger.debug("Dataset %s closed while describing it", entry.id)
        return meta

    def datasets(self) -> list[str]:
        """Registered dataset ids, least recently used first"""
        return self.cache.ids()

    # ------------------------------------------------------------------
    # Tiles
    # ------------------------------------------------------------------

    def get_tile(
        self,
        dataset_id: str,
        band: int,
        zoom: int,
        col: int,
        row: int,
        stretch: StretchParams | None = None,
    ) -> bytes:
        """Single-band grayscale PNG tile"""
        return self.render(
            TileRequest(
                mode=DisplayMode.GRAYSCALE,
                dataset_ids=(dataset_id,),
                bands=(band,),
                address=TileAddress(zoom, col, row),
                stretches=(stretch,) if stretch is not None else (),
            )
        )

    def get_rgb_tile(
        self,
        dataset_id: str,
        bands: list[int],
        zoom: int,
        col: int,
        row: int,
        stretches: list[StretchParams | None] | None = None,
    ) -> bytes:
        """Three bands of one dataset as an RGB PNG tile"""
        return self.render(
            TileRequest(
                mode=DisplayMode.RGB,
                dataset_ids=(dataset_id,),
                bands=tuple(bands),
                address=TileAddress(zoom, col, row),
                stretches=tuple(stretches or ()),
            )
        )

    def get_cross_layer_rgb_tile(
        self,
        dataset_ids: list[str],
        bands: list[int],
        zoom: int,
        col: int,
        row: int,
        stretches: list[StretchParams | None] | None = None,
    ) -> bytes:
        """One band from each of three datasets as an RGB PNG tile"""
        return self.render(
            TileRequest(
                mode=DisplayMode.CROSS_LAYER_RGB,
                dataset_ids=tuple(dataset_ids),
                bands=tuple(bands),
                address=TileAddress(zoom, col, row),
                stretches=tuple(stretches or ()),
            )
        )

    def get_pixel_tile(
        self,
        dataset_id: str,
        band: int,
        zoom: int,
        col: int,
        row: int,
        stretch: StretchParams | None = None,
    ) -> bytes:
        """Grayscale PNG tile of a plain image in pixel space"""
        return self.render(
            TileRequest(
                mode=DisplayMode.PIXEL_GRAYSCALE,
                dataset_ids=(dataset_id,),
                bands=(band,),
                address=TileAddress(zoom, col, row),
                stretches=(stretch,) if stretch is not None else (),
            )
        )

    def get_cross_layer_pixel_rgb_tile(
        self,
        dataset_ids: list[str],
        bands: list[int],
        zoom: int,
        col: int,
        row: int,
        stretches: list[StretchParams | None] | None = None,
    ) -> bytes:
        """Cross-layer RGB PNG tile of plain images in pixel space"""
        return self.render(
            TileRequest(
                mode=DisplayMode.PIXEL_CROSS_LAYER_RGB,
                dataset_ids=tuple(dataset_ids),
                bands=tuple(bands),
                address=TileAddress(zoom, col, row),
                stretches=tuple(stretches or ()),
            )
        )

    def render_tile(self, request: TileRequest) -> EncodedTile:
        """Render a request, keeping the empty-tile flag"""
        return dispatch(self.extractor, self.cache, request)

    def render(self, request: TileRequest) -> bytes:
        """Render a request to PNG bytes"""
        return self.render_tile(request).data

    def render_many(
        self,
        requests: list[TileRequest],
        max_workers: int | None = None,
    ) -> list[bytes | TileError]:
        """
        Render requests concurrently on a thread pool

        One failing tile does not affect the others: its slot in the result
        holds the TileError instead of bytes.

        Args:
            requests: Tile requests
            max_workers: Pool size (default: config.max_workers)

        Returns:
            PNG bytes or TileError per request, in request order
        """
        workers = max_workers or self.config.max_workers
        results: list[bytes | TileError | None] = [None] * len(requests)

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self.render, req): i for i, req in enumerate(requests)}
            for future in as_completed(futures):
                index = futures[future]
                try:
                    results[index] = future.result()
                except TileError as e:
                    results[index] = e

        failed = sum(isinstance(r, TileError) for r in results)
        if failed:
            logger.debug("render_many: %d of %d tiles failed", failed, len(requests))
        return results

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_raster_stats(self, dataset_id: str, band: int) -> BandStats:
        """
        Min, max, mean and standard deviation of a band

        Computed once per band and cached with the dataset.
        """
        meta = self.get_metadata(dataset_id)
        meta.check_band(band)
        return meta.statistics.get(band)

    def get_histogram(self, dataset_id: str, band: int, bucket_count: int = 256) -> Histogram:
        """
        Histogram of a band over its [min, max] range

        Args:
            dataset_id: Registered dataset
            band: Band index (1-based)
            bucket_count: Number of bins

        Returns:
            Histogram with ``bucket_count`` counts and ``bucket_count + 1`` edges
        """
        if bucket_count < 1:
            raise InvalidRequestError(f"Bucket count must be >= 1, got {bucket_count}")

        meta = self.get_metadata(dataset_id)
        meta.check_band(band)
        stats = meta.statistics.get(band)
        with RasterReader(meta.path) as reader:
            return compute_histogram(
                reader,
                band,
                stats,
                bucket_count,
                self.config.stats_sample_size,
                self.config.stats_resampling_method,
            )

    def _describe(self, path: str, dataset_id: str | None = None) -> RasterMetadata:
        meta = inspect_raster(path, dataset_id)
        meta.statistics = BandStatistics(
            meta.path,
            meta.band_count,
            self.config.stats_sample_size,
            self.config.stats_resampling_method,
        )
        return meta
