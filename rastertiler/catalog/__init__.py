"""
rastertiler Catalog Module

Dataset registry and lazily computed band statistics.
"""

from rastertiler.catalog.dataset_cache import CachedDataset, DatasetCache
from rastertiler.catalog.statistics import (
    BandStatistics,
    compute_band_stats,
    compute_histogram,
    compute_histogram_bins,
)

__all__ = [
    "BandStatistics",
    "CachedDataset",
    "DatasetCache",
    "compute_band_stats",
    "compute_histogram",
    "compute_histogram_bins",
]
