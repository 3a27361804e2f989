"""
rastertiler Tiles Module

Tile extraction per display mode and request dispatch.
"""

from rastertiler.tiles.dispatch import dispatch, resolve_dataset
from rastertiler.tiles.extractor import TileExtractor

__all__ = ["TileExtractor", "dispatch", "resolve_dataset"]
