"""
Dataset registry with LRU eviction.

Maps dataset ids to their path and metadata. Entries never hold an open
rasterio handle: a handle cannot be shared between threads, so each tile
request opens its own from the cached path. Evicting or removing an entry
therefore never disturbs requests already in flight.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass

from rastertiler.core.types import RasterMetadata

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


@dataclass(frozen=True)
class CachedDataset:
    """Registered dataset: identity, path and metadata captured at open"""

    id: str
    path: str
    metadata: RasterMetadata | None = None


class DatasetCache:
    """
    Thread-safe bounded LRU registry of datasets

    Every operation takes one lock for an O(1) section; raster reads happen
    outside the cache.

    Examples:
        >>> cache = DatasetCache(capacity=2)
        >>> cache.put("a", "/data/a.tif")
        >>> cache.get("a").path
        '/data/a.tif'
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._entries: OrderedDict[str, CachedDataset] = OrderedDict()
        self._lock = threading.Lock()

    def put(self, dataset_id: str, path: str, metadata: RasterMetadata | None = None) -> None:
        """
        Register (or replace) a dataset, evicting the least recently used
        entry when the cache is full
        """
        entry = CachedDataset(id=dataset_id, path=path, metadata=metadata)
        evicted = None
        with self._lock:
            if dataset_id in self._entries:
                self._entries.move_to_end(dataset_id)
            self._entries[dataset_id] = entry
            if len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)

        if evicted is not None:
            logger.debug("Evicted dataset %s (capacity %d)", evicted, self.capacity)

    def get(self, dataset_id: str) -> CachedDataset | None:
        """Look up a dataset and mark it most recently used"""
        with self._lock:
            entry = self._entries.get(dataset_id)
            if entry is not None:
                self._entries.move_to_end(dataset_id)
            return entry

    def update(self, dataset_id: str, metadata: RasterMetadata) -> bool:
        """
        Attach metadata to a registered dataset without re-registering it

        Returns False (and stores nothing) if the id was removed or evicted.
        """
        with self._lock:
            entry = self._entries.get(dataset_id)
            if entry is None:
                return False
            self._entries[dataset_id] = CachedDataset(entry.id, entry.path, metadata)
            return True

    def get_path(self, dataset_id: str) -> str | None:
        entry = self.get(dataset_id)
        return entry.path if entry is not None else None

    def remove(self, dataset_id: str) -> bool:
        """Drop a dataset; returns False if it was not registered"""
        with self._lock:
            return self._entries.pop(dataset_id, None) is not None

    def ids(self) -> list[str]:
        """Registered ids, least recently used first"""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, dataset_id: object) -> bool:
        # Membership checks do not count as access
        with self._lock:
            return dataset_id in self._entries

    def __repr__(self) -> str:
        return f"DatasetCache(capacity={self.capacity}, size={len(self)})"
