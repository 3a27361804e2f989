"""
rastertiler Core Module

Value types, configuration, exceptions and the public service API.
"""

from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import (
    ConfigError,
    EncodeError,
    ErrorKind,
    InvalidRequestError,
    NotFoundError,
    OpenError,
    RasterTilerError,
    ReadError,
    TileError,
)
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

__all__ = [
    # Types
    "BandStats",
    "DisplayMode",
    "EncodedTile",
    "Histogram",
    "RasterMetadata",
    "StretchParams",
    "TileAddress",
    "TileRequest",
    # Config
    "TilerConfig",
    # Exceptions
    "ConfigError",
    "EncodeError",
    "ErrorKind",
    "InvalidRequestError",
    "NotFoundError",
    "OpenError",
    "RasterTilerError",
    "ReadError",
    "TileError",
]
