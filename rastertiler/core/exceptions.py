"""
rastertiler Exceptions

Exception hierarchy for error handling.

Every failure that can reach a tile caller is a ``TileError`` carrying an
``ErrorKind``, so the host application can map errors onto placeholders
without inspecting exception classes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Caller-facing error categories"""

    NOT_FOUND = "not_found"
    OPEN_FAILURE = "open_failure"
    READ_FAILURE = "read_failure"
    ENCODE_FAILURE = "encode_failure"
    INVALID_REQUEST = "invalid_request"


class RasterTilerError(Exception):
    """Base exception for rastertiler"""

    pass


class ConfigError(RasterTilerError):
    """Invalid configuration value"""

    pass


class TileError(RasterTilerError):
    """Base class for errors surfaced to tile and dataset callers"""

    kind: ErrorKind = ErrorKind.READ_FAILURE

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": str(self)}


class NotFoundError(TileError):
    """Dataset id is not (or no longer) registered"""

    kind = ErrorKind.NOT_FOUND


class OpenError(TileError):
    """Dataset path could not be opened"""

    kind = ErrorKind.OPEN_FAILURE


class ReadError(TileError):
    """Raster read or reprojection failed"""

    kind = ErrorKind.READ_FAILURE


class EncodeError(TileError):
    """Image encoding failed"""

    kind = ErrorKind.ENCODE_FAILURE


class InvalidRequestError(TileError):
    """Malformed request parameters"""

    kind = ErrorKind.INVALID_REQUEST
