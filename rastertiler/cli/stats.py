"""
Statistics CLI commands

Band statistics and histograms computed from a decimated sample.
"""

import argparse

from rastertiler.core.api import TileService
from rastertiler.core.config import TilerConfig
from rastertiler.core.exceptions import TileError

BAR_WIDTH = 40


def run_stats(args: argparse.Namespace) -> int:
    """Run the stats command"""
    service = TileService(config=TilerConfig(compute_stats_on_open=False))
    try:
        meta = service.open_dataset(args.path)
        bands = [args.band] if args.band else range(1, meta.band_count + 1)
        stats = [service.get_raster_stats(meta.id, b) for b in bands]
    except TileError as e:
        print(f"Error: {e}")
        return 1

    print(f"{'Band':>4}  {'Min':>14}  {'Max':>14}  {'Mean':>14}  {'Std':>14}")
    print("-" * 68)
    for s in stats:
        print(f"{s.band:>4}  {s.min:>14.4f}  {s.max:>14.4f}  {s.mean:>14.4f}  {s.std_dev:>14.4f}")
    return 0


def run_histogram(args: argparse.Namespace) -> int:
    """Run the histogram command"""
    service = TileService(config=TilerConfig(compute_stats_on_open=False))
    try:
        meta = service.open_dataset(args.path)
        hist = service.get_histogram(meta.id, args.band, args.bins)
    except TileError as e:
        print(f"Error: {e}")
        return 1

    print(f"Band {hist.band}: [{hist.min:g}, {hist.max:g}], {hist.bin_count} bins")
    peak = max(hist.counts) or 1
    for i, count in enumerate(hist.counts):
        bar = "#" * round(count / peak * BAR_WIDTH)
        print(f"  {hist.bin_edges[i]:>12.4f}  {count:>10,}  {bar}")
    return 0
