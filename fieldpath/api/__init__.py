"""Map model, grid loading, pathfinding and query handling."""

from .grid import Grid
from .models import Path, Position, Tile, TileFlag
from .pathfinding import (
    PathResult,
    PathStopReason,
    bfs_distances,
    connected_components,
    find_path,
    shortest_distance,
)
from .queries import PathQueryService, handle_find_request

__all__ = [
    # Models
    "Path",
    "Position",
    "Tile",
    "TileFlag",
    # Grid
    "Grid",
    # Pathfinding
    "PathResult",
    "PathStopReason",
    "bfs_distances",
    "connected_components",
    "find_path",
    "shortest_distance",
    # Queries
    "PathQueryService",
    "handle_find_request",
]
