"""
PNG encoding for rendered tiles.

Tiles are 8-bit RGBA; the alpha channel marks no-data pixels. The fully
transparent tile returned for requests outside a dataset is encoded once
per tile size and reused.
"""

import functools
import logging
from io import BytesIO

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from rastertiler.core.exceptions import EncodeError
from rastertiler.core.types import EncodedTile

logger = logging.getLogger(__name__)


def encode_png(rgba: NDArray[np.uint8]) -> bytes:
    """
    Encode an (H, W, 4) uint8 array as an RGBA PNG

    Raises:
        EncodeError: If the array has the wrong shape or Pillow fails
    """
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise EncodeError(f"Expected an (H, W, 4) RGBA array, got shape {rgba.shape}")

    try:
        image = Image.fromarray(np.ascontiguousarray(rgba, dtype=np.uint8))
        buf = BytesIO()
        image.save(buf, format="PNG")
    except (OSError, ValueError, TypeError) as e:
        raise EncodeError(f"PNG encoding failed: {e}") from e
    return buf.getvalue()


@functools.lru_cache(maxsize=8)
def _empty_png(size: int) -> bytes:
    logger.debug("Encoding empty %dx%d tile", size, size)
    return encode_png(np.zeros((size, size, 4), dtype=np.uint8))


def empty_tile(size: int = 256) -> EncodedTile:
    """Fully transparent tile of the given size"""
    return EncodedTile(data=_empty_png(size), is_empty=True)


def encode_tile(rgba: NDArray[np.uint8]) -> EncodedTile:
    return EncodedTile(data=encode_png(rgba))
