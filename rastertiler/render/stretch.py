"""
Radiometric stretch and band compositing.

Turns float pixel buffers (NaN = no data) into 8-bit RGBA tiles.
"""

import numpy as np
from numpy.typing import NDArray

from rastertiler.core.types import StretchParams


def valid_mask(values: NDArray, nodata: float | None = None) -> NDArray[np.bool_]:
    """True where a pixel is finite and not equal to nodata"""
    mask = np.isfinite(values)
    if nodata is not None and np.isfinite(nodata):
        mask &= values != nodata
    return mask


def apply_stretch(
    values: NDArray,
    stretch: StretchParams,
    nodata: float | None = None,
) -> tuple[NDArray[np.uint8], NDArray[np.bool_]]:
    """
    Linear stretch with gamma correction

    ``clamp((v - min) / (max - min), 0, 1) ** (1 / gamma) * 255``, rounded
    to the nearest integer. Invalid pixels are set to 0.

    Args:
        values: Pixel buffer in native units
        stretch: Validated stretch parameters
        nodata: Extra value to treat as invalid

    Returns:
        (uint8 buffer, validity mask) with the shape of ``values``

    Examples:
        >>> out, _ = apply_stretch(np.array([-5.0, 0.0, 127.0, 300.0]), StretchParams())
        >>> out.tolist()
        [0, 0, 127, 255]
    """
    values = np.asarray(values, dtype=np.float64)
    mask = valid_mask(values, nodata)

    normalized = (np.where(mask, values, stretch.min) - stretch.min) / (stretch.max - stretch.min)
    normalized = np.clip(normalized, 0.0, 1.0)
    if stretch.gamma != 1.0:
        normalized = normalized ** (1.0 / stretch.gamma)

    out = np.rint(normalized * 255.0).astype(np.uint8)
    out[~mask] = 0
    return out, mask


def render_grayscale(
    values: NDArray,
    stretch: StretchParams,
    nodata: float | None = None,
) -> NDArray[np.uint8]:
    """Stretch one band into an RGBA tile with the value replicated in R, G and B"""
    gray, mask = apply_stretch(values, stretch, nodata)
    rgba = np.zeros((*gray.shape, 4), dtype=np.uint8)
    rgba[..., 0] = gray
    rgba[..., 1] = gray
    rgba[..., 2] = gray
    rgba[..., 3] = np.where(mask, 255, 0)
    return rgba


def render_rgb(
    channels: list[NDArray | None],
    stretches: list[StretchParams],
    nodata: list[float | None] | None = None,
    shape: tuple[int, int] | None = None,
) -> NDArray[np.uint8]:
    """
    Stretch three bands and interleave them into an RGBA tile

    A pixel is opaque when any channel is valid there; invalid channels of
    an opaque pixel render as 0. A channel may be None (no coverage), in
    which case ``shape`` must be given if all three are None.

    Args:
        channels: Red, green and blue buffers (or None)
        stretches: One stretch per channel
        nodata: Optional nodata value per channel
        shape: Tile shape, required only when every channel is None
    """
    nodata = nodata or [None, None, None]
    if shape is None:
        shape = next(c.shape for c in channels if c is not None)

    rgba = np.zeros((*shape, 4), dtype=np.uint8)
    any_valid = np.zeros(shape, dtype=bool)
    for i, (values, stretch) in enumerate(zip(channels, stretches)):
        if values is None:
            continue
        rgba[..., i], mask = apply_stretch(values, stretch, nodata[i])
        any_valid |= mask

    rgba[..., 3] = np.where(any_valid, 255, 0)
    return rgba
