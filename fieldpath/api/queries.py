"""
Path queries against a precomputed cache.

Answers (x1, y1, x2, y2) lookups from the path cache, optionally falling
back to a live A* search on a miss, and renders the plain-text responses
served for /find/{x1}/{y1}/{x2}/{y2}.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .grid import Grid
from .models import Position
from .pathfinding import PathResult, PathStopReason, find_path

if TYPE_CHECKING:
    from fieldpath.cache.paths import PathsCache

logger = logging.getLogger(__name__)

FIND_ROUTE_RE = re.compile(r"^/find/([^/]+)/([^/]+)/([^/]+)/([^/]+)/?$")

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404


@dataclass
class QueryStats:
    """Counters for answered queries."""

    queries: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    searches: int = 0
    not_found: int = 0

    @property
    def hit_rate(self) -> float:
        """Fraction of queries answered from the cache."""
        return self.cache_hits / self.queries if self.queries else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting."""
        return {
            "queries": self.queries,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "searches": self.searches,
            "not_found": self.not_found,
            "hit_rate": round(self.hit_rate, 4),
        }


class PathQueryService:
    """
    Answers path queries from a loaded cache.

    The cache is never modified: live search results on a miss are returned
    to the caller but not written back.

    Example usage:
        service = PathQueryService(cache, grid=grid)
        result = service.find(355, 55, 60, 320)
        if result:
            print(result.cost, list(result))
    """

    def __init__(
        self,
        cache: Optional["PathsCache"] = None,
        grid: Optional[Grid] = None,
        fallback_to_search: bool = True,
    ):
        """
        Initialize the query service.

        Args:
            cache: Precomputed paths (None to always search)
            grid: Map used for live searches on a cache miss
            fallback_to_search: Whether to search when the cache misses
        """
        self.cache = cache
        self.grid = grid
        self.fallback_to_search = fallback_to_search
        self.stats = QueryStats()

    def find(self, x1: int, y1: int, x2: int, y2: int) -> PathResult:
        """
        Find the path between two tiles.

        Returns:
            PathResult with the path and its cost, or NO_PATH_EXISTS
        """
        start = Position(x1, y1)
        goal = Position(x2, y2)
        self.stats.queries += 1

        if self.cache is not None:
            cached = self.cache.get(start, goal)
            if cached is not None:
                self.stats.cache_hits += 1
                return PathResult.found(cached)
            self.stats.cache_misses += 1

        if self.grid is None or not self.fallback_to_search:
            self.stats.not_found += 1
            return PathResult.failed(
                PathStopReason.NO_PATH_EXISTS,
                f"No cached path from {start} to {goal}",
            )

        began = time.perf_counter()
        result = find_path(self.grid, start, goal)
        self.stats.searches += 1
        logger.debug(f"Live search {start} -> {goal} took {time.perf_counter() - began:.4f}s")
        if not result.success:
            self.stats.not_found += 1
        return result


def _format_found(route: str, result: PathResult) -> str:
    """Render a successful lookup as plain text."""
    lines = [
        f"You requested {route}",
        f"Path length: {len(result.path)}",
        f"Distance: {result.cost:g}",
    ]
    lines.extend(f"{p.x},{p.y}" for p in result.path)
    return "\n".join(lines) + "\n"


def handle_find_request(service: PathQueryService, route: str) -> tuple[int, str]:
    """
    Handle a /find/{x1}/{y1}/{x2}/{y2} request.

    Args:
        service: Query service to answer from
        route: Request path

    Returns:
        Tuple of (status code, plain-text body)
    """
    match = FIND_ROUTE_RE.match(route)
    if not match:
        return HTTP_BAD_REQUEST, f"Invalid route: {route}\n"

    try:
        x1, y1, x2, y2 = (int(part) for part in match.groups())
    except ValueError as e:
        logger.info(f"Error converting route parameters to int: {e}")
        return HTTP_BAD_REQUEST, f"Invalid coordinates in {route}\n"

    logger.info(f"Finding path from {x1} {y1} to {x2} {y2}")
    result = service.find(x1, y1, x2, y2)
    if not result.success:
        logger.info(f"Path not found: {result.message}")
        return HTTP_NOT_FOUND, f"Path not found: {result.message}\n"

    canonical = f"/find/{x1}/{y1}/{x2}/{y2}"
    return HTTP_OK, _format_found(canonical, result)
