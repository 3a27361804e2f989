"""
Tiler configuration.

Defaults suit an interactive viewer; every field can be overridden from a
dict or from ``RASTERTILER_*`` environment variables.
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any

from rasterio.enums import Resampling

from rastertiler.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "RASTERTILER_"


@dataclass
class TilerConfig:
    """
    Runtime settings for the tile pipeline

    Attributes:
        cache_capacity: Maximum number of registered datasets (LRU)
        tile_size: Output tile edge in pixels
        pixel_scale: Degrees per pixel for non-georeferenced images
        overview_tolerance: How much coarser than the target a level may be
        resampling: Resampling used for tile reads and warps
        stats_resampling: Resampling used for statistics/histogram samples
        stats_sample_size: Max pixels per side read for statistics
        compute_stats_on_open: Compute all band statistics in open_dataset
        max_workers: Thread pool size for batch rendering

    Examples:
        >>> config = TilerConfig(cache_capacity=32)
        >>> config = TilerConfig.from_env()  # RASTERTILER_TILE_SIZE=512 ...
    """

    cache_capacity: int = 10
    tile_size: int = 256
    pixel_scale: float = 0.01
    overview_tolerance: float = 1.5
    resampling: str = "nearest"
    stats_resampling: str = "nearest"
    stats_sample_size: int = 1024
    compute_stats_on_open: bool = True
    max_workers: int = 8

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        for name in (
            "cache_capacity",
            "tile_size",
            "stats_sample_size",
            "max_workers",
        ):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.pixel_scale <= 0:
            raise ConfigError(f"pixel_scale must be positive, got {self.pixel_scale}")
        if self.overview_tolerance < 1.0:
            raise ConfigError(
                f"overview_tolerance must be >= 1.0, got {self.overview_tolerance}"
            )
        _resampling(self.resampling)
        _resampling(self.stats_resampling)

    @property
    def resampling_method(self) -> Resampling:
        return _resampling(self.resampling)

    @property
    def stats_resampling_method(self) -> Resampling:
        return _resampling(self.stats_resampling)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TilerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "TilerConfig":
        """
        Build a config from RASTERTILER_* variables

        Args:
            environ: Mapping to read (default: os.environ)

        Returns:
            TilerConfig with overrides applied
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw, f.type)
        if values:
            logger.debug("Config overrides from environment: %s", values)
        return cls(**values)


def _resampling(name: str) -> Resampling:
    try:
        return Resampling[name]
    except KeyError:
        raise ConfigError(f"Unknown resampling method: {name!r}") from None


def _coerce(name: str, raw: str, kind: type) -> Any:
    if kind is bool:
        return raw.strip().lower() in ("1", "true", "yes", "on")
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from None
