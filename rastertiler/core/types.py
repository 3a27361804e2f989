"""
Core value types shared by the tiling pipeline.

Tile addresses, stretch parameters, dataset metadata and request records.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from rastertiler.core.exceptions import InvalidRequestError

if TYPE_CHECKING:
    from rastertiler.catalog.statistics import BandStatistics

# Deepest zoom level accepted in a tile address
MAX_ZOOM = 30

Bounds = tuple[float, float, float, float]


class DisplayMode(str, Enum):
    """
    Closed set of tile rendering modes

    Each mode maps to exactly one TileExtractor entry point.
    """

    GRAYSCALE = "grayscale"
    RGB = "rgb"
    CROSS_LAYER_RGB = "cross_layer_rgb"
    PIXEL_GRAYSCALE = "pixel_grayscale"
    PIXEL_CROSS_LAYER_RGB = "pixel_cross_layer_rgb"

    @property
    def is_cross_layer(self) -> bool:
        return self in (DisplayMode.CROSS_LAYER_RGB, DisplayMode.PIXEL_CROSS_LAYER_RGB)

    @property
    def channel_count(self) -> int:
        return 1 if self in (DisplayMode.GRAYSCALE, DisplayMode.PIXEL_GRAYSCALE) else 3


@dataclass(frozen=True)
class TileAddress:
    """
    Quad-tree tile address (XYZ scheme, row 0 at the north edge)

    Examples:
        >>> TileAddress(zoom=2, col=2, row=1)
        TileAddress(zoom=2, col=2, row=1)
    """

    zoom: int
    col: int
    row: int

    def validate(self) -> "TileAddress":
        """Raise InvalidRequestError unless 0 <= col,row < 2**zoom"""
        if not 0 <= self.zoom <= MAX_ZOOM:
            raise InvalidRequestError(f"Zoom must be in [0, {MAX_ZOOM}], got {self.zoom}")
        n = 1 << self.zoom
        if not (0 <= self.col < n and 0 <= self.row < n):
            raise InvalidRequestError(
                f"Tile ({self.col}, {self.row}) out of range for zoom {self.zoom}"
            )
        return self

    def __str__(self) -> str:
        return f"{self.zoom}/{self.col}/{self.row}"


@dataclass(frozen=True)
class BandStats:
    """Summary statistics for one raster band"""

    band: int
    min: float
    max: float
    mean: float
    std_dev: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "band": self.band,
            "min": self.min,
            "max": self.max,
            "mean": self.mean,
            "std_dev": self.std_dev,
        }


@dataclass(frozen=True)
class StretchParams:
    """
    Linear stretch with gamma correction, in native pixel units

    Attributes:
        min: Value mapped to 0
        max: Value mapped to 255
        gamma: Gamma applied as ``x ** (1 / gamma)``; 1.0 means none
    """

    min: float = 0.0
    max: float = 255.0
    gamma: float = 1.0

    def validate(self) -> "StretchParams":
        for name in ("min", "max", "gamma"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidRequestError(f"Stretch {name} must be finite")
        if self.min >= self.max:
            raise InvalidRequestError(
                f"Stretch min must be below max (min={self.min}, max={self.max})"
            )
        if self.gamma <= 0:
            raise InvalidRequestError(f"Stretch gamma must be positive, got {self.gamma}")
        return self

    @classmethod
    def from_stats(cls, stats: BandStats, gamma: float = 1.0) -> "StretchParams":
        """Default stretch over a band's value range"""
        low, high = stats.min, stats.max
        if not high > low:
            high = low + 1.0
        return cls(min=low, max=high, gamma=gamma)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StretchParams":
        return cls(
            min=float(data["min"]),
            max=float(data["max"]),
            gamma=float(data.get("gamma", 1.0)),
        )


@dataclass(frozen=True)
class Histogram:
    """Histogram of a band over [min, max]"""

    band: int
    min: float
    max: float
    bin_count: int
    counts: list[int]
    bin_edges: list[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "band": self.band,
            "min": self.min,
            "max": self.max,
            "bin_count": self.bin_count,
            "counts": self.counts,
            "bin_edges": self.bin_edges,
        }


@dataclass
class RasterMetadata:
    """
    Metadata captured when a dataset is opened

    Everything except ``statistics`` is fixed after open. Band statistics are
    filled in lazily, once per band.

    Attributes:
        id: Opaque dataset identifier
        path: Filesystem path or GDAL URI
        width: Raster width in pixels
        height: Raster height in pixels
        band_count: Number of bands
        bounds: (minx, miny, maxx, maxy) in EPSG:4326, or pixel bounds
                when the dataset is not georeferenced
        native_bounds: Bounds in the dataset's own CRS
        projection: CRS as WKT ("" when absent)
        pixel_size: (x, y) pixel size in native units
        resolution: Approximate ground resolution in metres (base level)
        overview_factors: Decimation factors of available overviews
        nodata: Nodata value of band 1
        dtype: Pixel data type
        is_georeferenced: False for plain images (pixel coordinate mode)
        statistics: Lazily computed per-band statistics
    """

    id: str
    path: str
    width: int
    height: int
    band_count: int
    bounds: Bounds
    native_bounds: Bounds
    projection: str
    pixel_size: tuple[float, float]
    resolution: float
    overview_factors: list[int]
    nodata: float | None
    dtype: str
    is_georeferenced: bool
    statistics: "BandStatistics | None" = field(default=None, repr=False, compare=False)

    @property
    def overview_resolutions(self) -> list[float]:
        return [self.resolution * f for f in self.overview_factors]

    def check_band(self, band: int) -> int:
        """Raise InvalidRequestError unless band is a valid 1-based index"""
        if not 1 <= band <= self.band_count:
            raise InvalidRequestError(
                f"Band {band} out of range for dataset {self.id} (1..{self.band_count})"
            )
        return band

    def to_dict(self) -> dict[str, Any]:
        band_stats = []
        if self.statistics is not None:
            band_stats = [s.to_dict() for s in self.statistics.computed()]
        return {
            "id": self.id,
            "path": self.path,
            "width": self.width,
            "height": self.height,
            "bands": self.band_count,
            "bounds": list(self.bounds),
            "native_bounds": list(self.native_bounds),
            "projection": self.projection,
            "pixel_size": list(self.pixel_size),
            "resolution": self.resolution,
            "overview_factors": list(self.overview_factors),
            "nodata": self.nodata,
            "dtype": self.dtype,
            "band_stats": band_stats,
            "is_georeferenced": self.is_georeferenced,
        }


@dataclass(frozen=True)
class TileRequest:
    """
    A single tile request as issued by the map viewer

    ``dataset_ids`` holds one id for single-dataset modes and three (red,
    green, blue) for cross-layer modes. ``bands`` holds one band for
    grayscale modes and three for RGB modes. ``stretches`` is either empty
    (use band statistics) or one optional entry per band.
    """

    mode: DisplayMode
    dataset_ids: tuple[str, ...]
    bands: tuple[int, ...]
    address: TileAddress
    stretches: tuple[StretchParams | None, ...] = ()
    tile_size: int | None = None

    def validate(self) -> "TileRequest":
        expected_ids = 3 if self.mode.is_cross_layer else 1
        if len(self.dataset_ids) != expected_ids:
            raise InvalidRequestError(
                f"{self.mode.value} needs {expected_ids} dataset id(s), "
                f"got {len(self.dataset_ids)}"
            )
        if len(self.bands) != self.mode.channel_count:
            raise InvalidRequestError(
                f"{self.mode.value} needs {self.mode.channel_count} band(s), got {len(self.bands)}"
            )
        if self.stretches and len(self.stretches) != len(self.bands):
            raise InvalidRequestError("One stretch per band is required when stretches are given")
        if self.tile_size is not None and self.tile_size <= 0:
            raise InvalidRequestError(f"Tile size must be positive, got {self.tile_size}")
        self.address.validate()
        for stretch in self.stretches:
            if stretch is not None:
                stretch.validate()
        return self

    def stretch_for(self, index: int) -> StretchParams | None:
        return self.stretches[index] if self.stretches else None


@dataclass(frozen=True)
class EncodedTile:
    """PNG bytes for one tile; ``is_empty`` marks the transparent sentinel"""

    data: bytes
    is_empty: bool = False

    def __bytes__(self) -> bytes:
        return self.data

    def __len__(self) -> int:
        return len(self.data)
