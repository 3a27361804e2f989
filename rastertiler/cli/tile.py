"""
Tile CLI command

Renders one XYZ tile of a raster to a PNG file.
"""

import argparse
from pathlib import Path

from rastertiler.core.api import TileService
from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import TileError
from rastertiler.core.types import DisplayMode, StretchParams, TileAddress, TileRequest


def run_tile(args: argparse.Namespace) -> int:
    """Run the tile command"""
    service = TileService(config=TilerConfig(tile_size=args.size, compute_stats_on_open=False))

    try:
        meta = service.open_dataset(args.path)
        request = TileRequest(
            mode=_mode(args),
            dataset_ids=(meta.id,) * (3 if args.rgb and args.pixel else 1),
            bands=tuple(args.rgb) if args.rgb else (args.band,),
            address=TileAddress(args.zoom, args.col, args.row),
            stretches=_stretches(args),
        )
        tile = service.render_tile(request)
    except TileError as e:
        print(f"Error ({e.kind.value}): {e}")
        return 1

    output = Path(args.output)
    output.write_bytes(tile.data)
    status = "empty tile" if tile.is_empty else f"{len(tile):,} bytes"
    print(f"Wrote {output} ({status})")
    return 0


def _mode(args: argparse.Namespace) -> DisplayMode:
    if args.pixel:
        # Pixel RGB composites go through the cross-layer path with one dataset
        return DisplayMode.PIXEL_CROSS_LAYER_RGB if args.rgb else DisplayMode.PIXEL_GRAYSCALE
    return DisplayMode.RGB if args.rgb else DisplayMode.GRAYSCALE


def _stretches(args: argparse.Namespace) -> tuple[StretchParams | None, ...]:
    if args.min is None or args.max is None:
        return ()
    stretch = StretchParams(min=args.min, max=args.max, gamma=args.gamma)
    return (stretch,) * (3 if args.rgb else 1)
