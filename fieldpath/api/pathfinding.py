"""
Pathfinding over the tile grid.

Implements A* on a 4-connected grid with uniform step cost, plus a
breadth-first reference search used for connectivity analysis.

- Movement is cardinal only (up, down, left, right)
- Every step costs 1, so path cost is the number of steps
- Equal-length paths are ranked by per-tile tie weights, which makes the
  chosen shortest path unique for each pair
- Returns PathResult with reason for success/failure
"""

import heapq
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from .grid import Grid
from .models import Path, Position, path_cost

logger = logging.getLogger(__name__)

# Search costs are integers: one step is STEP_UNIT, and entering a tile adds
# its tie weight. Tie weights are < 2**64 and a path has < 2**32 tiles, so
# the weights never outweigh a step.
TIE_BITS = 64
STEP_UNIT = 1 << (TIE_BITS + 32)
_MASK64 = (1 << 64) - 1


class PathStopReason(Enum):
    """Reasons why pathfinding stopped or couldn't start."""
    SUCCESS = "success"
    START_OUT_OF_BOUNDS = "start_out_of_bounds"
    TARGET_OUT_OF_BOUNDS = "target_out_of_bounds"
    START_UNWALKABLE = "start_unwalkable"
    TARGET_UNWALKABLE = "target_unwalkable"
    NO_PATH_EXISTS = "no_path_exists"


@dataclass
class PathResult:
    """Result of a pathfinding operation."""
    path: Path = field(default_factory=tuple)
    reason: PathStopReason = PathStopReason.SUCCESS
    cost: float = 0.0
    message: str = ""

    @property
    def success(self) -> bool:
        """Whether pathfinding succeeded."""
        return self.reason == PathStopReason.SUCCESS

    def __bool__(self) -> bool:
        """Allow `if result:` to check for success."""
        return self.success and len(self.path) > 0

    def __iter__(self):
        """Allow `for position in result:` to iterate path."""
        return iter(self.path)

    def __len__(self) -> int:
        """Return number of points on the path."""
        return len(self.path)

    def __repr__(self) -> str:
        if self.success:
            return f"PathResult(path=[{len(self.path)} points], cost={self.cost}, reason=SUCCESS)"
        return f"PathResult(path=[], reason={self.reason.value}, message='{self.message}')"

    @classmethod
    def found(cls, path: Path) -> "PathResult":
        """Build a successful result for a path."""
        return cls(tuple(path), PathStopReason.SUCCESS, path_cost(path))

    @classmethod
    def failed(cls, reason: PathStopReason, message: str = "") -> "PathResult":
        """Build a failed result."""
        return cls((), reason, 0.0, message)


def tie_weight(pos: Position) -> int:
    """
    Deterministic 64-bit weight for a tile (splitmix64 of its coordinates).

    Ranking equal-length paths by the sum of these weights picks the same
    path for a pair regardless of search order. That choice is closed under
    sub-paths and reversal, so sub-paths stored in the cache always agree
    with each other.
    """
    z = (((pos.y & 0xFFFFFFFF) << 32) | (pos.x & 0xFFFFFFFF)) + 0x9E3779B97F4A7C15
    z &= _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def _heuristic(a: Position, b: Position) -> int:
    """
    Heuristic for A* (Manhattan distance in step units).

    Admissible and consistent: every step costs at least STEP_UNIT.
    """
    return a.manhattan_distance(b) * STEP_UNIT


def _check_endpoints(grid: Grid, start: Position, goal: Position) -> Optional[PathResult]:
    """Return a failed result if either endpoint is unusable."""
    if not grid.in_bounds(start.x, start.y):
        return PathResult.failed(PathStopReason.START_OUT_OF_BOUNDS, f"Start {start} is out of map bounds")
    if not grid.in_bounds(goal.x, goal.y):
        return PathResult.failed(PathStopReason.TARGET_OUT_OF_BOUNDS, f"Target {goal} is out of map bounds")
    if not grid.is_walkable(start.x, start.y):
        return PathResult.failed(PathStopReason.START_UNWALKABLE, f"Start {start} is not walkable")
    if not grid.is_walkable(goal.x, goal.y):
        return PathResult.failed(PathStopReason.TARGET_UNWALKABLE, f"Target {goal} is not walkable")
    return None


def find_path(grid: Grid, start: Position, goal: Position) -> PathResult:
    """
    Find the shortest path from start to goal using A*.

    Args:
        grid: Map to search
        start: Starting position
        goal: Target position

    Returns:
        PathResult with the full path (start and goal inclusive) and its
        cost, or a failure reason. An unreachable goal is reported as
        NO_PATH_EXISTS and is not an error.
    """
    failure = _check_endpoints(grid, start, goal)
    if failure is not None:
        return failure

    path = _astar(grid, start, goal)
    if not path:
        logger.debug(f"find_path: A* found no path from {start} to {goal}")
        return PathResult.failed(
            PathStopReason.NO_PATH_EXISTS,
            f"No walkable connection from {start} to {goal}",
        )

    return PathResult.found(path)


def _astar(grid: Grid, start: Position, goal: Position) -> list[Position]:
    """
    A* pathfinding algorithm.

    Args:
        grid: Map to search
        start: Starting position (assumed walkable)
        goal: Target position (assumed walkable)

    Returns:
        List of positions from start to goal (inclusive), or empty if no path
    """
    # Priority queue: (f_score, counter, position)
    # Counter breaks any remaining f_score ties by insertion order
    counter = 0
    open_set = [(_heuristic(start, goal), counter, start)]
    came_from: dict[Position, Position] = {}
    g_score: dict[Position, int] = {start: 0}
    closed: set[Position] = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)

        if current in closed:
            # Stale entry superseded by a cheaper push
            continue

        if current == goal:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path

        closed.add(current)

        for neighbor in current.adjacent():
            if neighbor in closed:
                continue
            if not grid.is_walkable(neighbor.x, neighbor.y):
                continue

            tentative_g = g_score[current] + STEP_UNIT + tie_weight(neighbor)

            # Relax and reinsert: an open node reached more cheaply is pushed
            # again and the stale heap entry is skipped when popped.
            if neighbor not in g_score or tentative_g < g_score[neighbor]:
                came_from[neighbor] = current
                g_score[neighbor] = tentative_g
                counter += 1
                heapq.heappush(open_set, (tentative_g + _heuristic(neighbor, goal), counter, neighbor))

    return []  # No path found


def _bfs_reachable(grid: Grid, start: Position) -> Iterator[tuple[int, Position]]:
    """
    Generator that yields reachable positions via BFS.

    Args:
        grid: Map to search
        start: Starting position

    Yields:
        Tuple of (distance, position) for each reachable position in BFS order
    """
    if not grid.is_walkable(start.x, start.y):
        return

    visited = {start}
    queue = deque([(0, start)])

    while queue:
        dist, pos = queue.popleft()
        yield (dist, pos)

        for neighbor in pos.adjacent():
            if neighbor in visited:
                continue
            if not grid.is_walkable(neighbor.x, neighbor.y):
                continue
            visited.add(neighbor)
            queue.append((dist + 1, neighbor))


def bfs_distances(grid: Grid, start: Position) -> dict[Position, int]:
    """Step distance from start to every reachable walkable tile."""
    return {pos: dist for dist, pos in _bfs_reachable(grid, start)}


def shortest_distance(grid: Grid, start: Position, goal: Position) -> Optional[int]:
    """
    Exhaustive breadth-first shortest distance.

    Returns:
        Number of steps, or None if goal is unreachable
    """
    for dist, pos in _bfs_reachable(grid, start):
        if pos == goal:
            return dist
    return None


def connected_components(grid: Grid) -> dict[Position, int]:
    """
    Label every walkable tile with the id of its connected region.

    Region ids are assigned in row-major order of each region's first tile.

    Returns:
        Mapping of walkable position to region id
    """
    labels: dict[Position, int] = {}
    region = 0
    for pos in grid.walkable_positions():
        if pos in labels:
            continue
        for _, member in _bfs_reachable(grid, pos):
            labels[member] = region
        region += 1

    logger.debug(f"connected_components: {region} regions over {len(labels)} walkable tiles")
    return labels
