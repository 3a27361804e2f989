"""
rastertiler CLI Entry Points

Provides command-line interface for:
- info: Show raster metadata
- tile: Render one XYZ tile to a PNG file
- stats: Show band statistics
- histogram: Show a band histogram
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="rastertiler - XYZ PNG tiles from large rasters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rastertiler info scene.tif                       Show raster metadata
  rastertiler tile scene.tif 5 27 12 -o t.png      Render a grayscale tile
  rastertiler tile scene.tif 5 27 12 --rgb 3 2 1   Render an RGB tile
  rastertiler tile photo.jpg 3 3 3 --pixel         Render a plain image tile
  rastertiler stats scene.tif --band 2             Show band statistics
  rastertiler histogram scene.tif --bins 32        Show a band histogram
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Info command
    info_parser = subparsers.add_parser("info", help="Show raster metadata")
    info_parser.add_argument("path", help="Raster path")
    info_parser.add_argument("--json", action="store_true", help="Print metadata as JSON")

    # Tile command
    tile_parser = subparsers.add_parser("tile", help="Render one tile to PNG")
    tile_parser.add_argument("path", help="Raster path")
    tile_parser.add_argument("zoom", type=int, help="Zoom level")
    tile_parser.add_argument("col", type=int, help="Tile column (x)")
    tile_parser.add_argument("row", type=int, help="Tile row (y)")
    tile_parser.add_argument(
        "--output", "-o", default="tile.png", help="Output PNG path (default: tile.png)"
    )
    tile_parser.add_argument("--band", type=int, default=1, help="Band index (default: 1)")
    tile_parser.add_argument(
        "--rgb", type=int, nargs=3, metavar=("R", "G", "B"), help="Bands to composite as RGB"
    )
    tile_parser.add_argument("--min", type=float, help="Stretch minimum")
    tile_parser.add_argument("--max", type=float, help="Stretch maximum")
    tile_parser.add_argument("--gamma", type=float, default=1.0, help="Gamma (default: 1.0)")
    tile_parser.add_argument(
        "--pixel", action="store_true", help="Use pixel space (non-georeferenced images)"
    )
    tile_parser.add_argument("--size", type=int, default=256, help="Tile size (default: 256)")

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show band statistics")
    stats_parser.add_argument("path", help="Raster path")
    stats_parser.add_argument("--band", type=int, help="Band index (default: all bands)")

    # Histogram command
    hist_parser = subparsers.add_parser("histogram", help="Show a band histogram")
    hist_parser.add_argument("path", help="Raster path")
    hist_parser.add_argument("--band", type=int, default=1, help="Band index (default: 1)")
    hist_parser.add_argument("--bins", type=int, default=16, help="Number of bins (default: 16)")

    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(message)s" if not args.verbose else "%(levelname)s: %(message)s"
    )

    if args.command == "info":
        from rastertiler.cli.info import run_info

        status = run_info(args)
    elif args.command == "tile":
        from rastertiler.cli.tile import run_tile

        status = run_tile(args)
    elif args.command == "stats":
        from rastertiler.cli.stats import run_stats

        status = run_stats(args)
    elif args.command == "histogram":
        from rastertiler.cli.stats import run_histogram

        status = run_histogram(args)
    else:
        parser.print_help()
        sys.exit(1)

    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
