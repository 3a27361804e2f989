"""
Tests for RasterReader
"""

import numpy as np
import pytest
from rasterio.transform import from_bounds

from rastertiler.core.exceptions import InvalidRequestError, OpenError
from rastertiler.grid.mercator import PixelWindow, tile_to_web_mercator_bounds
from rastertiler.io.reader import WEB_MERCATOR, RasterReader


class TestRasterReader:
    """Test RasterReader basics"""

    def test_open_and_close(self, single_band_tif):
        reader = RasterReader(single_band_tif)
        assert not reader.dataset.closed
        assert (reader.width, reader.height, reader.count) == (1024, 1024, 1)
        reader.close()
        assert reader.dataset.closed

    def test_context_manager(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            assert not reader.dataset.closed
        assert reader.dataset.closed

    def test_missing_file_raises_open_error(self, tmp_dir):
        with pytest.raises(OpenError):
            RasterReader(str(tmp_dir / "missing.tif"))

    def test_not_a_raster_raises_open_error(self, tmp_dir):
        path = tmp_dir / "notes.tif"
        path.write_text("not a raster")
        with pytest.raises(OpenError):
            RasterReader(str(path))

    def test_repr(self, single_band_tif):
        reader = RasterReader(single_band_tif)
        assert "1024 x 1024" in repr(reader)
        reader.close()
        assert "closed" in repr(reader)


class TestGeoreferencing:
    """Test georeferencing detection and bounds"""

    def test_geotiff_is_georeferenced(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            assert reader.is_georeferenced()

    def test_plain_png_is_not_georeferenced(self, plain_png):
        with RasterReader(plain_png) as reader:
            assert not reader.is_georeferenced()

    def test_geographic_bounds(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            assert reader.get_bounds() == pytest.approx((-10.0, -10.0, 10.0, 10.0))

    def test_projected_bounds_transformed_to_wgs84(self, utm_tif):
        with RasterReader(utm_tif) as reader:
            lon_min, lat_min, lon_max, lat_max = reader.get_bounds()
            assert 14.0 < lon_min < lon_max < 16.0
            assert 44.0 < lat_min < lat_max < 46.0

    def test_resolution_in_meters(self, utm_tif, single_band_tif):
        with RasterReader(utm_tif) as reader:
            assert reader.get_resolution() == pytest.approx(100.0)
        with RasterReader(single_band_tif) as reader:
            # 20 degrees / 1024 px at the equator
            assert reader.get_resolution() == pytest.approx(20 / 1024 * 111320, rel=1e-3)


class TestReads:
    """Test masked, decimated and warped reads"""

    def test_full_read(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            data = reader.read([1])
        assert data.shape == (1, 1024, 1024)
        assert data.dtype == np.float64
        assert data[0, 0, 0] == 1.0

    def test_window_read(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            data = reader.read([1], PixelWindow(10, 20, 30, 40))
        assert data.shape == (1, 40, 30)
        assert data[0, 0, 0] == 31.0  # (20 + 10) % 1000 + 1

    def test_decimated_read(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            data = reader.read([1], out_shape=(64, 64))
        assert data.shape == (1, 64, 64)

    def test_nodata_becomes_nan(self, nodata_tif):
        with RasterReader(nodata_tif) as reader:
            data = reader.read([1])
        assert np.isnan(data[0, :, :100]).all()
        assert np.isfinite(data[0, :, 100:]).all()

    def test_bad_band_raises(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            with pytest.raises(InvalidRequestError):
                reader.read([2])

    def test_sample_is_capped(self, single_band_tif):
        with RasterReader(single_band_tif) as reader:
            sample = reader.sample(1, max_size=256)
        assert sample.shape == (256, 256)

    def test_read_warped_fills_tile(self, single_band_tif):
        """A 3857 grid inside the raster is fully covered"""
        with RasterReader(single_band_tif) as reader:
            # Tile 6/32/31 spans lon 0..5.625, lat 0..~5.6
            bounds = tile_to_web_mercator_bounds(6, 32, 31)
            data = reader.read_warped([1], from_bounds(*bounds, 64, 64), (64, 64), WEB_MERCATOR)
        assert data.shape == (1, 64, 64)
        assert np.isfinite(data).all()

    def test_read_warped_masks_nodata(self, nodata_tif):
        """Source nodata and the area outside the raster come back as NaN"""
        with RasterReader(nodata_tif) as reader:
            # Tile 4/7/7 spans lon -22.5..0, lat 0..~21.9: the nodata half and beyond
            bounds = tile_to_web_mercator_bounds(4, 7, 7)
            data = reader.read_warped([1], from_bounds(*bounds, 32, 32), (32, 32), WEB_MERCATOR)
        assert np.isnan(data).all()

    def test_read_warped_unit_pixel_origin(self, make_geotiff):
        """A window whose corner sits on (0, 0) in a 1 unit/pixel raster is still warped"""
        data = np.full((1, 180, 360), 7, dtype=np.uint8)
        path = make_geotiff("global.tif", data, bounds=(-180.0, -90.0, 180.0, 90.0))
        with RasterReader(path) as reader:
            bounds = tile_to_web_mercator_bounds(1, 1, 1)
            warped = reader.read_warped([1], from_bounds(*bounds, 64, 64), (64, 64), WEB_MERCATOR)
        assert (warped == 7.0).all()


class TestOverviews:
    """Test overview access"""

    def test_overview_factors(self, overview_tif, single_band_tif):
        with RasterReader(overview_tif) as reader:
            assert reader.overview_factors() == [2, 4, 8]
        with RasterReader(single_band_tif) as reader:
            assert reader.overview_factors() == []

    def test_open_at_overview_level(self, overview_tif):
        with RasterReader(overview_tif, overview_level=1) as reader:
            assert (reader.width, reader.height) == (256, 256)
            assert reader.transform.a == pytest.approx(20 / 256)
