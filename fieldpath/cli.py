"""
Command-line interface for map pathfinding and the path cache.

Usage:
    python -m fieldpath.cli precompute               Build and save the path cache
    python -m fieldpath.cli find 355 55 60 320       Answer one path query
    python -m fieldpath.cli info                     Show map statistics
    python -m fieldpath.cli verify                   Validate a saved cache
"""

import argparse
import json
import logging
import sys
import time

from fieldpath.api.grid import Grid
from fieldpath.api.pathfinding import connected_components
from fieldpath.api.queries import PathQueryService
from fieldpath.cache.paths import build_all
from fieldpath.cache.store import CacheStore
from fieldpath.cache.validation import validate_cache
from fieldpath.config import Config, load_config, setup_logging
from fieldpath.exceptions import FieldPathError

logger = logging.getLogger(__name__)


def _load_grid(config: Config) -> Grid:
    """Load the configured map. Errors abort the command."""
    return Grid.from_file(config.map.file)


def cmd_precompute(args: argparse.Namespace, config: Config) -> int:
    """Build the all-pairs path cache and save it."""
    grid = _load_grid(config)

    cache, stats = build_all(
        grid,
        prune_unreachable=config.cache.prune_unreachable,
        progress_interval=config.cache.progress_interval,
    )

    store = CacheStore(config.cache.file, compress=config.cache.compress, indent=config.cache.indent)
    size = store.save(cache)

    print(f"Cache entries: {len(cache)}")
    print(f"Searches: {stats.searches} ({stats.entries_per_search:.1f} entries per search)")
    print(f"Unreachable pairs: {stats.unreachable}")
    print(f"Elapsed: {stats.elapsed_seconds:.2f}s")
    print(f"Saved {size} bytes to {store.path}")
    return 0


def cmd_find(args: argparse.Namespace, config: Config) -> int:
    """Answer a single path query."""
    cache = None
    store = CacheStore(config.cache.file)
    if not args.no_cache and store.exists():
        cache = store.load()

    grid = None
    if cache is None or config.query.fallback_to_search or args.ascii:
        grid = _load_grid(config)

    fallback = config.query.fallback_to_search or cache is None
    service = PathQueryService(cache, grid=grid, fallback_to_search=fallback)

    print(f"Finding path from {args.x1} {args.y1} to {args.x2} {args.y2}")
    start = time.perf_counter()
    result = service.find(args.x1, args.y1, args.x2, args.y2)
    print(f"Time: {time.perf_counter() - start:.4f}s")

    if not result.success:
        print(f"Path not found: {result.message}")
        return 1

    print(f"Path length: {len(result.path)}")
    print(f"Distance: {result.cost:g}")
    if args.json:
        print(json.dumps([p.to_dict() for p in result.path]))
    if args.ascii and grid is not None:
        print(grid.to_ascii(result.path))
    return 0


def cmd_info(args: argparse.Namespace, config: Config) -> int:
    """Print map statistics."""
    grid = _load_grid(config)
    regions = connected_components(grid)
    print(f"Width: {grid.width}")
    print(f"Height: {grid.height}")
    print(f"Walkable tiles: {grid.walkable_count}")
    print(f"Connected regions: {len(set(regions.values()))}")
    if args.ascii:
        print(grid.to_ascii())
    return 0


def cmd_verify(args: argparse.Namespace, config: Config) -> int:
    """Validate a saved cache against the map."""
    cache = CacheStore(config.cache.file).load()
    grid = None if args.no_map else _load_grid(config)

    result = validate_cache(cache, grid)
    print(f"Entries checked: {result.entries_checked}")
    if result.valid:
        print("Cache is valid")
        return 0

    for error in result.errors:
        print(f"  {error}")
    if result.truncated:
        print("  ... (more issues omitted)")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="fieldpath - tile map pathfinding with an all-pairs path cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        "-l",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level override",
    )
    parser.add_argument(
        "--file",
        "-f",
        type=str,
        default=None,
        help="Map file override (.fld2)",
    )
    parser.add_argument(
        "--cache-file",
        type=str,
        default=None,
        help="Cache file override",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # precompute command
    precompute_parser = subparsers.add_parser("precompute", help="Build and save the path cache")
    precompute_parser.add_argument(
        "--compress",
        action="store_true",
        help="zlib-compress the cache file",
    )
    precompute_parser.set_defaults(func=cmd_precompute)

    # find command
    find_parser = subparsers.add_parser("find", help="Find a path between two tiles")
    for name in ("x1", "y1", "x2", "y2"):
        find_parser.add_argument(name, type=int)
    find_parser.add_argument("--no-cache", action="store_true", help="Ignore the cache and search")
    find_parser.add_argument("--ascii", action="store_true", help="Print the map with the path")
    find_parser.add_argument("--json", action="store_true", help="Print path points as JSON")
    find_parser.set_defaults(func=cmd_find)

    # info command
    info_parser = subparsers.add_parser("info", help="Show map statistics")
    info_parser.add_argument("--ascii", action="store_true", help="Print the map")
    info_parser.set_defaults(func=cmd_info)

    # verify command
    verify_parser = subparsers.add_parser("verify", help="Validate a saved cache")
    verify_parser.add_argument("--no-map", action="store_true", help="Skip walkability checks")
    verify_parser.set_defaults(func=cmd_verify)

    args = parser.parse_args(argv)

    # Load config and set up logging
    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level
    if args.file:
        config.map.file = args.file
    if args.cache_file:
        config.cache.file = args.cache_file
    if getattr(args, "compress", False):
        config.cache.compress = True
    setup_logging(config.logging)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return args.func(args, config)
    except FieldPathError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
