"""
Per-band statistics and histograms.

Band statistics are expensive (a decimated pass over the whole band), so
they are computed at most once per (dataset, band) and cached. Each band
has its own slot and lock, so first requests for different bands do not
wait on each other.
"""

import logging
import threading

import numpy as np
from numpy.typing import NDArray
from rasterio.enums import Resampling

from rastertiler.core.exceptions import InvalidRequestError
from rastertiler.core.types import BandStats, Histogram
from rastertiler.io.reader import RasterReader

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 1024

NODATA_TOLERANCE = 1e-10


class _StatsSlot:
    __slots__ = ("lock", "value")

    def __init__(self):
        self.lock = threading.Lock()
        self.value: BandStats | None = None


class BandStatistics:
    """
    Lazily computed statistics for every band of one dataset

    Holds the dataset path captured at open time; computing a band opens a
    short-lived reader unless the caller passes one in.

    Examples:
        >>> stats = BandStatistics("scene.tif", band_count=4)
        >>> stats.get(1).max
        3021.0
    """

    def __init__(
        self,
        path: str,
        band_count: int,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        resampling: Resampling = Resampling.nearest,
    ):
        self.path = path
        self.band_count = band_count
        self.sample_size = sample_size
        self.resampling = resampling
        self._slots = [_StatsSlot() for _ in range(band_count)]

    def get(self, band: int, reader: RasterReader | None = None) -> BandStats:
        """
        Statistics for a band, computing them on first use

        Concurrent first calls for the same band compute once; the others
        wait for and share that result. A failed computation is not cached.

        Raises:
            InvalidRequestError: Band out of range
            OpenError, ReadError: Dataset could not be read
        """
        slot = self._slot(band)
        if slot.value is not None:
            return slot.value

        with slot.lock:
            if slot.value is None:
                slot.value = self._compute(band, reader)
        return slot.value

    def is_computed(self, band: int) -> bool:
        return self._slot(band).value is not None

    def computed(self) -> list[BandStats]:
        """Statistics already cached, in band order"""
        return [s.value for s in self._slots if s.value is not None]

    def _slot(self, band: int) -> _StatsSlot:
        if not 1 <= band <= self.band_count:
            raise InvalidRequestError(f"Band {band} out of range (1..{self.band_count})")
        return self._slots[band - 1]

    def _compute(self, band: int, reader: RasterReader | None) -> BandStats:
        if reader is not None:
            return compute_band_stats(reader, band, self.sample_size, self.resampling)
        with RasterReader(self.path) as own_reader:
            return compute_band_stats(own_reader, band, self.sample_size, self.resampling)


def compute_band_stats(
    reader: RasterReader,
    band: int,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    resampling: Resampling = Resampling.nearest,
) -> BandStats:
    """
    Compute min/max/mean/std of a band from a decimated sample

    Exact for rasters no larger than ``sample_size`` on each side. A band
    with no valid pixels falls back to its data type's range.
    """
    sample = reader.sample(band, sample_size, resampling)
    valid = sample[np.isfinite(sample)]

    if valid.size == 0:
        low, high = _dtype_range(reader.dataset.dtypes[band - 1])
        logger.warning(
            "Band %d of %s has no valid pixels; using dtype range [%s, %s]",
            band,
            reader.path,
            low,
            high,
        )
        return BandStats(band=band, min=low, max=high, mean=0.0, std_dev=0.0)

    stats = BandStats(
        band=band,
        min=float(valid.min()),
        max=float(valid.max()),
        mean=float(valid.mean()),
        std_dev=float(valid.std()),
    )
    logger.debug("Computed statistics for %s band %d: %s", reader.path, band, stats)
    return stats


def compute_histogram_bins(
    values: NDArray,
    min_value: float,
    max_value: float,
    bin_count: int,
    nodata: float | None = None,
) -> tuple[list[int], list[float]]:
    """
    Bin values over [min_value, max_value]

    Values outside the range, NaN and nodata are skipped. A value v falls
    in bin ``floor((v - min) / (max - min) * (bin_count - 1))``, so the
    minimum lands in the first bin and the maximum in the last. When the
    range is empty every valid value is counted in bin 0.

    Args:
        values: Pixel values, any shape
        min_value: Lower edge
        max_value: Upper edge
        bin_count: Number of bins (>= 1)
        nodata: Value to skip

    Returns:
        (counts, bin_edges) with len(bin_edges) == bin_count + 1

    Examples:
        >>> counts, edges = compute_histogram_bins(np.arange(100), 0, 99, 10)
        >>> sum(counts), len(edges)
        (100, 11)
    """
    if bin_count < 1:
        raise InvalidRequestError(f"Bin count must be >= 1, got {bin_count}")

    values = np.asarray(values, dtype=np.float64).ravel()
    valid = np.isfinite(values)
    if nodata is not None:
        valid &= np.abs(values - nodata) >= NODATA_TOLERANCE

    value_range = max_value - min_value
    counts = np.zeros(bin_count, dtype=np.int64)

    if value_range > 0:
        in_range = valid & (values >= min_value) & (values <= max_value)
        scaled = (values[in_range] - min_value) / value_range * (bin_count - 1)
        indices = np.minimum(np.floor(scaled).astype(np.int64), bin_count - 1)
        counts += np.bincount(indices, minlength=bin_count)
    else:
        counts[0] = int(valid.sum())

    bin_width = value_range / bin_count
    edges = [min_value + i * bin_width for i in range(bin_count + 1)]
    return [int(c) for c in counts], edges


def compute_histogram(
    reader: RasterReader,
    band: int,
    stats: BandStats,
    bin_count: int = 256,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    resampling: Resampling = Resampling.nearest,
) -> Histogram:
    """Histogram of a band over its statistics range, from a decimated sample"""
    sample = reader.sample(band, sample_size, resampling)
    counts, edges = compute_histogram_bins(
        sample, stats.min, stats.max, bin_count, reader.nodata
    )
    return Histogram(
        band=band,
        min=stats.min,
        max=stats.max,
        bin_count=bin_count,
        counts=counts,
        bin_edges=edges,
    )


def _dtype_range(dtype: str) -> tuple[float, float]:
    kind = np.dtype(dtype)
    if np.issubdtype(kind, np.integer):
        info = np.iinfo(kind)
        return float(info.min), float(info.max)
    return 0.0, 1.0
