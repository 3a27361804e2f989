"""
rastertiler Render Module

Stretch and compositing of pixel buffers into RGBA tiles.
"""

from rastertiler.render.stretch import apply_stretch, render_grayscale, render_rgb, valid_mask

__all__ = ["apply_stretch", "render_grayscale", "render_rgb", "valid_mask"]
