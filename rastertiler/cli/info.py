"""
Info CLI command

Shows raster size, bands, georeferencing, bounds and overviews.
"""

import argparse
import json

from rastertiler.core.api import TileService
from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import TileError


def run_info(args: argparse.Namespace) -> int:
    """Run the info command"""
    service = TileService(config=TilerConfig(compute_stats_on_open=False))
    try:
        meta = service.open_dataset(args.path)
    except TileError as e:
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps(meta.to_dict(), indent=2))
        return 0

    print(f"Raster: {meta.path}")
    print(f"  Size: {meta.width} x {meta.height}, {meta.band_count} band(s), {meta.dtype}")
    print(f"  Georeferenced: {'yes' if meta.is_georeferenced else 'no (pixel mode)'}")
    print(f"  Bounds: {_fmt_bounds(meta.bounds)}")
    if meta.is_georeferenced:
        print(f"  Native bounds: {_fmt_bounds(meta.native_bounds)}")
        print(f"  Resolution: {meta.resolution:.3f} m")
    print(f"  Nodata: {meta.nodata}")
    if meta.overview_factors:
        print(f"  Overviews: {', '.join(str(f) for f in meta.overview_factors)}")
    else:
        print("  Overviews: none")
    return 0


def _fmt_bounds(bounds) -> str:
    return "(" + ", ".join(f"{v:.6f}" for v in bounds) + ")"
