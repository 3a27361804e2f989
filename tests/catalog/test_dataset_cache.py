"""
Tests for the dataset registry
"""

import threading

import pytest

from rastertiler.catalog.dataset_cache import CachedDataset, DatasetCache


class TestDatasetCache:
    """Test DatasetCache basics"""

    def test_put_and_get(self):
        cache = DatasetCache()
        cache.put("a", "/data/a.tif")
        entry = cache.get("a")
        assert entry == CachedDataset(id="a", path="/data/a.tif", metadata=None)
        assert cache.get_path("a") == "/data/a.tif"

    def test_missing(self):
        cache = DatasetCache()
        assert cache.get("nope") is None
        assert cache.get_path("nope") is None
        assert "nope" not in cache

    def test_remove(self):
        cache = DatasetCache()
        cache.put("a", "/data/a.tif")
        assert cache.remove("a") is True
        assert cache.remove("a") is False
        assert len(cache) == 0

    def test_replace_keeps_single_entry(self):
        cache = DatasetCache()
        cache.put("a", "/data/a.tif")
        cache.put("a", "/data/b.tif")
        assert len(cache) == 1
        assert cache.get_path("a") == "/data/b.tif"

    def test_update_attaches_metadata(self):
        cache = DatasetCache()
        cache.put("a", "/data/a.tif")
        metadata = object()
        assert cache.update("a", metadata) is True
        assert cache.get("a") == CachedDataset(id="a", path="/data/a.tif", metadata=metadata)

    def test_update_does_not_reregister(self):
        cache = DatasetCache()
        cache.put("a", "/data/a.tif")
        cache.remove("a")
        assert cache.update("a", object()) is False
        assert "a" not in cache

    def test_update_keeps_recency(self):
        cache = DatasetCache(capacity=2)
        cache.put("a", "/data/a.tif")
        cache.put("b", "/data/b.tif")
        cache.update("a", object())
        assert cache.ids() == ["a", "b"]

    def test_clear(self):
        cache = DatasetCache()
        for name in "abc":
            cache.put(name, f"/data/{name}.tif")
        cache.clear()
        assert len(cache) == 0
        assert cache.ids() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            DatasetCache(capacity=0)

    def test_default_capacity(self):
        assert DatasetCache().capacity == 10


class TestEviction:
    """Test LRU eviction"""

    def test_overflow_evicts_least_recently_used(self):
        """capacity + 1 distinct ids evict exactly the oldest"""
        cache = DatasetCache(capacity=3)
        for name in "abcd":
            cache.put(name, f"/data/{name}.tif")
        assert len(cache) == 3
        assert "a" not in cache
        assert cache.ids() == ["b", "c", "d"]

    def test_get_refreshes_recency(self):
        """A read entry is not the next eviction victim"""
        cache = DatasetCache(capacity=3)
        for name in "abc":
            cache.put(name, f"/data/{name}.tif")
        cache.get("a")
        cache.put("d", "/data/d.tif")
        assert "a" in cache
        assert "b" not in cache

    def test_contains_does_not_refresh(self):
        cache = DatasetCache(capacity=2)
        cache.put("a", "/data/a.tif")
        cache.put("b", "/data/b.tif")
        assert "a" in cache
        cache.put("c", "/data/c.tif")
        assert "a" not in cache

    def test_reput_refreshes_recency(self):
        cache = DatasetCache(capacity=2)
        cache.put("a", "/data/a.tif")
        cache.put("b", "/data/b.tif")
        cache.put("a", "/data/a.tif")
        cache.put("c", "/data/c.tif")
        assert cache.ids() == ["a", "c"]


class TestConcurrency:
    """Test concurrent access"""

    def test_parallel_put_get(self):
        cache = DatasetCache(capacity=50)
        errors = []

        def worker(n):
            try:
                for i in range(200):
                    key = f"{n}-{i % 20}"
                    cache.put(key, f"/data/{key}.tif")
                    cache.get(key)
                    if i % 7 == 0:
                        cache.remove(key)
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(cache) <= 50
