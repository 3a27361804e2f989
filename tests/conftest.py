"""
rastertiler Test Configuration

Shared pytest fixtures for all tests: small rasters written with rasterio
(and one plain PNG written with Pillow) into temporary directories.
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest
import rasterio
from PIL import Image
from rasterio.enums import Resampling
from rasterio.transform import from_bounds

from rastertiler import DatasetCache, TilerConfig, TileService

# Bounds used by the end-to-end scenarios
SCENE_BOUNDS = (-10.0, -10.0, 10.0, 10.0)


def write_geotiff(path, data, bounds, crs="EPSG:4326", nodata=None, overviews=None):
    """Write a (bands, rows, cols) array as a GeoTIFF"""
    count, height, width = data.shape
    transform = from_bounds(*bounds, width, height)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)
        if overviews:
            dst.build_overviews(overviews, Resampling.average)
    return str(path)


@pytest.fixture
def tmp_dir():
    """Temporary directory removed after the test"""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def single_band_tif(tmp_dir):
    """1024x1024 uint16 band over (-10, -10, 10, 10) in EPSG:4326, values 1..1000"""
    rows, cols = np.indices((1024, 1024))
    data = ((rows + cols) % 1000 + 1).astype(np.uint16)[np.newaxis]
    return write_geotiff(tmp_dir / "single.tif", data, SCENE_BOUNDS)


@pytest.fixture
def rgb_tif(tmp_dir):
    """256x256 3-band uint8 raster over (-10, -10, 10, 10), a gradient per band"""
    rows, cols = np.indices((256, 256))
    data = np.stack(
        [
            cols.astype(np.uint8),
            rows.astype(np.uint8),
            ((rows + cols) // 2).astype(np.uint8),
        ]
    )
    return write_geotiff(tmp_dir / "rgb.tif", data, SCENE_BOUNDS)


@pytest.fixture
def utm_tif(tmp_dir):
    """512x512 float32 raster in UTM zone 33N at 100 m (around 15E, 45N)"""
    rows, cols = np.indices((512, 512))
    data = (rows * 0.5 + cols).astype(np.float32)[np.newaxis]
    bounds = (474000.0, 4960000.0, 525200.0, 5011200.0)
    return write_geotiff(tmp_dir / "utm.tif", data, bounds, crs="EPSG:32633")


@pytest.fixture
def overview_tif(tmp_dir):
    """1024x1024 raster with 2x, 4x and 8x overviews"""
    rows, cols = np.indices((1024, 1024))
    data = (rows % 256).astype(np.uint8)[np.newaxis]
    return write_geotiff(tmp_dir / "overviews.tif", data, SCENE_BOUNDS, overviews=[2, 4, 8])


@pytest.fixture
def nodata_tif(tmp_dir):
    """200x200 float32 raster whose western half is nodata (-9999)"""
    data = np.full((1, 200, 200), 50.0, dtype=np.float32)
    data[:, :, :100] = -9999.0
    data[:, :, 100:] = np.linspace(0, 100, 100, dtype=np.float32)
    return write_geotiff(tmp_dir / "nodata.tif", data, SCENE_BOUNDS, nodata=-9999.0)


@pytest.fixture
def plain_png(tmp_dir):
    """400x200 grayscale PNG without any georeferencing"""
    rows, cols = np.indices((200, 400))
    data = ((cols + rows) % 256).astype(np.uint8)
    path = tmp_dir / "photo.png"
    Image.fromarray(data).save(path)
    return str(path)


@pytest.fixture
def config():
    """Default configuration"""
    return TilerConfig()


@pytest.fixture
def service(config):
    """TileService with its own cache"""
    return TileService(cache=DatasetCache(config.cache_capacity), config=config)


@pytest.fixture
def make_geotiff(tmp_dir):
    """Factory writing a GeoTIFF into the test's temporary directory"""

    def _make(name, data, bounds=SCENE_BOUNDS, **kwargs):
        return write_geotiff(tmp_dir / name, data, bounds, **kwargs)

    return _make
