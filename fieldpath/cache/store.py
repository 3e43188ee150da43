"""
Cache persistence.

Cache files are JSON objects keyed by "(x,y)" start keys, each holding an
object keyed by "(x,y)" goal keys whose values are ordered point lists:

    {"(0,0)": {"(2,0)": [{"x": 0, "y": 0}, {"x": 1, "y": 0}, {"x": 2, "y": 0}]}}

Files may optionally be zlib-compressed; load() detects this.
"""

import json
import logging
import zlib
from pathlib import Path as FilePath

from fieldpath.api.models import Position
from fieldpath.exceptions import CacheFileError, CacheFormatError

from .paths import PathsCache

logger = logging.getLogger(__name__)

# First byte of a zlib stream with the default window size
_ZLIB_HEADER = 0x78


def cache_to_dict(cache: PathsCache) -> dict:
    """Convert a cache into its two-level keyed JSON structure."""
    data: dict[str, dict[str, list[dict]]] = {}
    for start, goal, path in cache.entries():
        data.setdefault(start.key(), {})[goal.key()] = [p.to_dict() for p in path]
    return data


def cache_from_dict(data: dict) -> PathsCache:
    """
    Rebuild a cache from its JSON structure.

    Raises:
        CacheFormatError: If keys or points are malformed, or a path does
            not run from its start key to its goal key
    """
    if not isinstance(data, dict):
        raise CacheFormatError(f"Top level must be an object, got {type(data).__name__}")

    cache = PathsCache()
    for start_key, goals in data.items():
        start = _parse_key(start_key)
        if not isinstance(goals, dict):
            raise CacheFormatError(f"Entry for {start_key} must be an object", key=start_key)

        for goal_key, points in goals.items():
            goal = _parse_key(goal_key)
            path = _parse_points(points, f"{start_key}->{goal_key}")
            if not path or path[0] != start or path[-1] != goal:
                raise CacheFormatError(
                    f"Path for {start_key}->{goal_key} does not connect its endpoints",
                    key=f"{start_key}->{goal_key}",
                )
            if not cache.set_if_absent(start, goal, path):
                raise CacheFormatError(
                    f"Duplicate entry {start_key}->{goal_key}",
                    key=f"{start_key}->{goal_key}",
                )
    return cache


def _parse_key(key: str) -> Position:
    try:
        return Position.from_key(key)
    except ValueError as e:
        raise CacheFormatError(str(e), key=key) from e


def _parse_points(points: object, key: str) -> tuple[Position, ...]:
    if not isinstance(points, list):
        raise CacheFormatError(f"Path for {key} must be a list", key=key)

    parsed = []
    for point in points:
        if not isinstance(point, dict):
            raise CacheFormatError(f"Invalid point in path for {key}: {point!r}", key=key)
        x, y = point.get("x"), point.get("y")
        # bool is an int subclass; coordinates must be plain integers
        if type(x) is not int or type(y) is not int:
            raise CacheFormatError(f"Invalid point in path for {key}: {point!r}", key=key)
        parsed.append(Position(x, y))
    return tuple(parsed)


class CacheStore:
    """
    Reads and writes path cache files.

    Example usage:
        store = CacheStore("data/paths_cache.json")
        store.save(cache)

        cache = store.load()
    """

    def __init__(self, path: str | FilePath, compress: bool = False, indent: int | None = None):
        """
        Initialize the store.

        Args:
            path: Cache file path
            compress: zlib-compress the JSON when saving
            indent: JSON indentation (ignored when compressing)
        """
        self.path = FilePath(path)
        self.compress = compress
        self.indent = indent

    def save(self, cache: PathsCache) -> int:
        """
        Write the cache to disk.

        Returns:
            Number of bytes written

        Raises:
            CacheFileError: If the file cannot be written
        """
        indent = None if self.compress else self.indent
        payload = json.dumps(cache_to_dict(cache), indent=indent).encode()
        if self.compress:
            payload = zlib.compress(payload)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(payload)
        except OSError as e:
            raise CacheFileError(f"Cannot write cache file {self.path}: {e}", path=str(self.path)) from e

        logger.info(f"Saved {len(cache)} cache entries to {self.path} ({len(payload)} bytes)")
        return len(payload)

    def load(self) -> PathsCache:
        """
        Read the cache from disk.

        Raises:
            CacheFileError: If the file cannot be read
            CacheFormatError: If the contents are malformed
        """
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise CacheFileError(f"Cannot read cache file {self.path}: {e}", path=str(self.path)) from e

        if raw[:1] == bytes([_ZLIB_HEADER]):
            try:
                raw = zlib.decompress(raw)
            except zlib.error as e:
                raise CacheFormatError(f"Corrupt compressed cache file {self.path}: {e}") from e

        try:
            data = json.loads(raw.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CacheFormatError(f"Malformed cache file {self.path}: {e}") from e

        cache = cache_from_dict(data)
        logger.info(f"Loaded {len(cache)} cache entries from {self.path}")
        return cache

    def exists(self) -> bool:
        """Check if the cache file exists."""
        return self.path.exists()


def save_cache(cache: PathsCache, path: str | FilePath, compress: bool = False) -> int:
    """Write a cache file. See CacheStore.save."""
    return CacheStore(path, compress=compress).save(cache)


def load_cache(path: str | FilePath) -> PathsCache:
    """Read a cache file. See CacheStore.load."""
    return CacheStore(path).load()
