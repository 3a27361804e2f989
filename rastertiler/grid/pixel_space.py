"""
Synthetic coordinates for non-georeferenced images.

Plain images (photos, scans, microscopy) have no CRS. They are placed in a
shared pseudo-geographic space so the regular XYZ tiling math can serve
them: the image is centred on (0, 0) at a fixed number of degrees per
pixel, and its half height is clamped to 85 degrees so it stays inside the
Web Mercator square.
"""

from dataclasses import dataclass

from affine import Affine

from rastertiler.core.types import Bounds

DEFAULT_PIXEL_SCALE = 0.01

MAX_HALF_HEIGHT = 85.0


@dataclass(frozen=True)
class PixelSpace:
    """
    Pseudo-geographic frame for an image of ``width`` x ``height`` pixels

    Attributes:
        width: Full-resolution image width
        height: Full-resolution image height
        scale: Degrees per pixel along x (and along y unless clamped)

    Examples:
        >>> space = PixelSpace(1000, 500)
        >>> space.bounds
        (-5.0, -2.5, 5.0, 2.5)
    """

    width: int
    height: int
    scale: float = DEFAULT_PIXEL_SCALE

    @property
    def half_width(self) -> float:
        return self.width * self.scale / 2.0

    @property
    def half_height(self) -> float:
        return min(self.height * self.scale / 2.0, MAX_HALF_HEIGHT)

    @property
    def y_scale(self) -> float:
        """Degrees per pixel along y; smaller than ``scale`` for very tall images"""
        return 2.0 * self.half_height / self.height

    @property
    def bounds(self) -> Bounds:
        return (-self.half_width, -self.half_height, self.half_width, self.half_height)

    def transform_for(self, width: int | None = None, height: int | None = None) -> Affine:
        """
        Pixel -> synthetic transform for the image or one of its overviews

        Args:
            width: Pixel width of the level being read (default: full width)
            height: Pixel height of the level being read (default: full height)
        """
        width = width or self.width
        height = height or self.height
        return Affine(
            2.0 * self.half_width / width,
            0.0,
            -self.half_width,
            0.0,
            -2.0 * self.half_height / height,
            self.half_height,
        )
