"""
Cache consistency checks.

Validates a path cache before it is served: every path must run between
its keys in unit cardinal steps, and sub-paths cached for the same goal or
start must agree with each other.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fieldpath.api.grid import Grid

from .paths import PathsCache

logger = logging.getLogger(__name__)

# Stop collecting after this many issues
MAX_ISSUES = 100


@dataclass
class CacheValidation:
    """Result of validating a cache."""

    entries_checked: int = 0
    errors: list[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        if len(self.errors) >= MAX_ISSUES:
            self.truncated = True
            return
        self.errors.append(message)


def validate_cache(cache: PathsCache, grid: Optional[Grid] = None) -> CacheValidation:
    """
    Validate path shape and decomposition consistency.

    For every cached path P from a to b and every index i, the entry for
    (P[i], b), when present, must equal P[i:], and the entry for (a, P[i]),
    when present, must equal P[:i+1].

    Args:
        cache: Cache to check
        grid: Optional map; when given, every point must be walkable

    Returns:
        CacheValidation listing any problems found
    """
    result = CacheValidation()

    for start, goal, path in cache.entries():
        result.entries_checked += 1
        label = f"{start.key()}->{goal.key()}"

        if not path or path[0] != start or path[-1] != goal:
            result.add(f"{label}: path does not connect its endpoints")
            continue

        for prev, nxt in zip(path, path[1:]):
            if not prev.is_adjacent(nxt):
                result.add(f"{label}: non-cardinal step {prev.key()} -> {nxt.key()}")
                break

        if grid is not None:
            blocked = [p for p in path if not grid.is_walkable(p.x, p.y)]
            if blocked:
                result.add(f"{label}: crosses unwalkable tile {blocked[0].key()}")

        for i, point in enumerate(path):
            suffix = cache.get(point, goal)
            if suffix is not None and suffix != path[i:]:
                result.add(f"{label}: entry {point.key()}->{goal.key()} disagrees with suffix at index {i}")
                break
            prefix = cache.get(start, point)
            if prefix is not None and prefix != path[: i + 1]:
                result.add(f"{label}: entry {start.key()}->{point.key()} disagrees with prefix at index {i}")
                break

        if result.truncated:
            break

    if result.valid:
        logger.info(f"Cache valid: {result.entries_checked} entries checked")
    else:
        logger.warning(f"Cache has {len(result.errors)} issue(s) in {result.entries_checked} entries")
    return result
