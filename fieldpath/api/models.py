"""
Data models for the tile map.

These dataclasses represent map positions, tile properties and paths
in a structured, hashable way so they can be used directly as cache keys.
"""

import re
from dataclasses import dataclass
from enum import IntFlag


class TileFlag(IntFlag):
    """Bit layout of a tile byte in a map file."""

    NONE = 0
    WALK = 1 << 0
    SNIPE = 1 << 1
    WATER = 1 << 2
    CLIFF = 1 << 3


_KEY_RE = re.compile(r"^\((-?\d+),(-?\d+)\)$")


@dataclass(frozen=True, order=True)
class Position:
    """A position on the map."""

    x: int
    y: int

    def manhattan_distance(self, other: "Position") -> int:
        """Manhattan distance - number of moves with 4-directional movement."""
        return abs(self.x - other.x) + abs(self.y - other.y)

    def adjacent(self) -> list["Position"]:
        """Get the 4 cardinal neighbours in up, down, left, right order."""
        return [
            Position(self.x, self.y - 1),
            Position(self.x, self.y + 1),
            Position(self.x - 1, self.y),
            Position(self.x + 1, self.y),
        ]

    def is_adjacent(self, other: "Position") -> bool:
        """Whether other is exactly one cardinal step away."""
        return self.manhattan_distance(other) == 1

    def key(self) -> str:
        """Serialized key in the "(x,y)" form used by cache files."""
        return f"({self.x},{self.y})"

    @classmethod
    def from_key(cls, key: str) -> "Position":
        """Parse an "(x,y)" key. Raises ValueError on malformed input."""
        match = _KEY_RE.match(key.replace(" ", ""))
        if not match:
            raise ValueError(f"Invalid position key: {key!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> "Position":
        """Create from dictionary."""
        return cls(int(data["x"]), int(data["y"]))


@dataclass(frozen=True)
class Tile:
    """Properties of a single map tile."""

    walkable: bool = False
    snipe: bool = False
    water: bool = False
    cliff: bool = False

    @classmethod
    def from_byte(cls, value: int) -> "Tile":
        """Decode a tile byte from a map file."""
        flags = TileFlag(value & 0x0F)
        return cls(
            walkable=TileFlag.WALK in flags,
            snipe=TileFlag.SNIPE in flags,
            water=TileFlag.WATER in flags,
            cliff=TileFlag.CLIFF in flags,
        )

    def to_byte(self) -> int:
        """Encode back into a tile byte."""
        flags = TileFlag.NONE
        if self.walkable:
            flags |= TileFlag.WALK
        if self.snipe:
            flags |= TileFlag.SNIPE
        if self.water:
            flags |= TileFlag.WATER
        if self.cliff:
            flags |= TileFlag.CLIFF
        return int(flags)


# Ordered start -> goal, both ends inclusive
Path = tuple[Position, ...]


def path_cost(path: Path) -> float:
    """Cost of a path under uniform step cost."""
    return float(max(len(path) - 1, 0))
