"""
All-pairs path cache.

Precomputes the shortest path between every ordered pair of walkable
tiles. Each A* result is decomposed into sub-paths so a single search
resolves many pairs at once: any two points on a shortest path are joined
by the sub-path between them, which is itself shortest.

Entries are write-once. The first path stored for a pair is never
replaced during a build.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from fieldpath.api.grid import Grid
from fieldpath.api.models import Path, Position
from fieldpath.api.pathfinding import connected_components, find_path

logger = logging.getLogger(__name__)


class PathsCache:
    """
    Mapping of start position -> goal position -> path.

    Example usage:
        cache = PathsCache()
        cache.set_if_absent(a, b, path)

        path = cache.get(a, b)
        for start, goal, path in cache.entries():
            ...
    """

    def __init__(self):
        self._paths: dict[Position, dict[Position, Path]] = {}
        self._size = 0

    def get(self, start: Position, goal: Position) -> Optional[Path]:
        """Get the cached path, or None if the pair is unresolved."""
        goals = self._paths.get(start)
        if goals is None:
            return None
        return goals.get(goal)

    def contains(self, start: Position, goal: Position) -> bool:
        """Check whether a pair has an entry."""
        goals = self._paths.get(start)
        return goals is not None and goal in goals

    def set_if_absent(self, start: Position, goal: Position, path: Path) -> bool:
        """
        Store a path unless the pair already has one.

        This is the only write path into the cache. A parallel builder must
        make this check-then-insert atomic per key.

        Returns:
            True if the path was stored
        """
        goals = self._paths.setdefault(start, {})
        if goal in goals:
            return False
        goals[goal] = tuple(path)
        self._size += 1
        return True

    def starts(self) -> list[Position]:
        """Start positions with at least one entry."""
        return [start for start, goals in self._paths.items() if goals]

    def goals(self, start: Position) -> list[Position]:
        """Goal positions cached for a start."""
        return list(self._paths.get(start, {}))

    def entries(self) -> Iterator[tuple[Position, Position, Path]]:
        """Iterate over (start, goal, path) entries."""
        for start, goals in self._paths.items():
            for goal, path in goals.items():
                yield start, goal, path

    def __len__(self) -> int:
        """Number of (start, goal) entries."""
        return self._size

    def __contains__(self, pair: tuple[Position, Position]) -> bool:
        return self.contains(*pair)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathsCache):
            return NotImplemented
        mine = {s: g for s, g in self._paths.items() if g}
        theirs = {s: g for s, g in other._paths.items() if g}
        return mine == theirs

    def __repr__(self) -> str:
        return f"PathsCache(starts={len(self.starts())}, entries={self._size})"


def lookup(cache: PathsCache, start: Position, goal: Position) -> Optional[Path]:
    """Look up the cached path between two tiles."""
    return cache.get(start, goal)


# =============================================================================
# Path decomposition
# =============================================================================


def _decompose_forward(path: Path, goal: Position, cache: PathsCache) -> int:
    """Store every suffix path[i:] as the route from path[i] to goal."""
    written = 0
    for i in range(len(path)):
        if cache.set_if_absent(path[i], goal, path[i:]):
            written += 1
    return written


def _decompose_backward(path: Path, start: Position, cache: PathsCache) -> int:
    """Store every prefix path[:i+1] as the route from start to path[i]."""
    written = 0
    for i in range(len(path) - 1, -1, -1):
        if cache.set_if_absent(start, path[i], path[: i + 1]):
            written += 1
    return written


def record_path(cache: PathsCache, path: Path) -> int:
    """
    Store a shortest path and every sub-path it proves.

    Seeds entries for the path's start and goal in both directions:
    suffixes ending at the goal, prefixes starting at the start, and the
    same for the reversed path. Movement is undirected so the reverse of a
    shortest path is shortest in the opposite direction.

    Args:
        cache: Cache to populate
        path: Shortest path, start and goal inclusive

    Returns:
        Number of new entries written
    """
    path = tuple(path)
    if not path:
        return 0

    start, goal = path[0], path[-1]
    written = 0
    if cache.set_if_absent(start, goal, path):
        written += 1
    written += _decompose_forward(path, goal, cache)
    written += _decompose_backward(path, start, cache)

    reverse = path[::-1]
    written += _decompose_forward(reverse, start, cache)
    written += _decompose_backward(reverse, goal, cache)
    return written


# =============================================================================
# Build driver
# =============================================================================


@dataclass
class BuildStats:
    """Statistics for one cache build."""

    walkable_tiles: int = 0
    regions: int = 0
    pairs_total: int = 0
    searches: int = 0
    entries_written: int = 0
    already_cached: int = 0
    unreachable: int = 0
    pruned: int = 0
    elapsed_seconds: float = 0.0
    unreachable_pairs: list[tuple[Position, Position]] = field(default_factory=list)

    @property
    def entries_per_search(self) -> float:
        """Average number of entries resolved by one search."""
        return self.entries_written / self.searches if self.searches else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting."""
        return {
            "walkable_tiles": self.walkable_tiles,
            "regions": self.regions,
            "pairs_total": self.pairs_total,
            "searches": self.searches,
            "entries_written": self.entries_written,
            "already_cached": self.already_cached,
            "unreachable": self.unreachable,
            "pruned": self.pruned,
            "entries_per_search": round(self.entries_per_search, 2),
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


ProgressCallback = Callable[[int, int, BuildStats], None]


def build_all(
    grid: Grid,
    prune_unreachable: bool = True,
    progress_interval: int = 0,
    on_progress: Optional[ProgressCallback] = None,
    keep_unreachable: bool = False,
) -> tuple[PathsCache, BuildStats]:
    """
    Precompute paths between every ordered pair of walkable tiles.

    Pairs are visited in row-major order of start, then goal. A pair that is
    already cached is skipped; otherwise A* runs and the result is
    decomposed with record_path(). Unreachable pairs are logged and
    skipped, never aborting the build.

    Args:
        grid: Map to precompute
        prune_unreachable: Skip searching pairs in different connected
            regions (they can never be joined)
        progress_interval: Log progress every N start tiles (0 disables)
        on_progress: Optional callback(done_starts, total_starts, stats)
        keep_unreachable: Record unreachable pairs in stats.unreachable_pairs

    Returns:
        Tuple of (cache, stats)
    """
    began = time.perf_counter()
    cache = PathsCache()
    stats = BuildStats()

    walkable = list(grid.walkable_positions())
    stats.walkable_tiles = len(walkable)
    stats.pairs_total = len(walkable) * len(walkable)

    regions: dict[Position, int] = {}
    if prune_unreachable:
        regions = connected_components(grid)
        stats.regions = len(set(regions.values()))

    logger.info(
        f"Building path cache: {stats.walkable_tiles} walkable tiles, "
        f"{stats.pairs_total} ordered pairs"
    )

    for done, start in enumerate(walkable, start=1):
        pruned_before = stats.pruned
        for goal in walkable:
            if cache.contains(start, goal):
                stats.already_cached += 1
                continue

            if prune_unreachable and regions[start] != regions[goal]:
                stats.pruned += 1
                stats.unreachable += 1
                if keep_unreachable:
                    stats.unreachable_pairs.append((start, goal))
                continue

            result = find_path(grid, start, goal)
            stats.searches += 1
            if not result.success:
                logger.debug(f"Path not found from {start} to {goal}: {result.message}")
                stats.unreachable += 1
                if keep_unreachable:
                    stats.unreachable_pairs.append((start, goal))
                continue

            stats.entries_written += record_path(cache, result.path)

        if stats.pruned > pruned_before:
            logger.debug(
                f"Skipped {stats.pruned - pruned_before} unreachable goals from {start} "
                f"(region {regions[start]})"
            )
        if progress_interval and done % progress_interval == 0:
            logger.info(
                f"Progress: {done}/{len(walkable)} starts, "
                f"{len(cache)} entries, {stats.searches} searches"
            )
        if on_progress is not None:
            on_progress(done, len(walkable), stats)

    stats.elapsed_seconds = time.perf_counter() - began
    logger.info(f"Path cache built: {stats.to_dict()}")
    return cache, stats
