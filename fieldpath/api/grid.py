"""
Tile grid loaded from a binary map file.

Map file layout:
- Bytes 0-1: width, 16-bit, byte-swapped (byte 1 is the high byte)
- Bytes 2-3: height, same convention
- Remaining bytes: width * height tile bytes, row-major

The grid is read-only once loaded.
"""

import logging
from pathlib import Path as FilePath
from typing import Iterator, Optional

import numpy as np

from fieldpath.exceptions import GridFileError, GridFormatError

from .models import Path, Position, Tile, TileFlag

logger = logging.getLogger(__name__)

HEADER_SIZE = 4


def _read_dimension(low: int, high: int) -> int:
    """Combine a byte-swapped 16-bit dimension."""
    return (high << 8) | low


class Grid:
    """
    Immutable 2D tile map.

    Tiles are stored as a uint8 array of shape (height, width) holding the
    raw tile bytes; Tile objects are decoded on demand.

    Example usage:
        grid = Grid.from_file("prt_fild02.fld2")
        if grid.is_walkable(10, 20):
            tile = grid.tile_at(10, 20)
    """

    def __init__(self, width: int, height: int, tiles: np.ndarray):
        """
        Initialize the grid.

        Args:
            width: Number of columns
            height: Number of rows
            tiles: Tile bytes, shape (height, width) or flat width*height
        """
        data = np.asarray(tiles, dtype=np.uint8)
        if data.size != width * height:
            raise GridFormatError(
                f"Tile data has {data.size} entries, expected {width}x{height}={width * height}",
                expected=width * height,
                actual=data.size,
            )
        self.width = width
        self.height = height
        self._tiles = data.reshape((height, width)).copy()
        self._tiles.setflags(write=False)
        self._walkable = (self._tiles & int(TileFlag.WALK)) > 0
        self._walkable.setflags(write=False)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Grid":
        """
        Parse a grid from map file bytes.

        Raises:
            GridFormatError: If data is shorter than the header or the tile
                count does not match the declared dimensions
        """
        if len(data) < HEADER_SIZE:
            raise GridFormatError(
                "File is too short to contain width and height information",
                expected=HEADER_SIZE,
                actual=len(data),
            )

        width = _read_dimension(data[0], data[1])
        height = _read_dimension(data[2], data[3])
        logger.info(f"Map dimensions: width={width} height={height}")

        body = data[HEADER_SIZE:]
        if len(body) != width * height:
            raise GridFormatError(
                f"Invalid data format: {len(body)} tile bytes, expected {width}x{height}={width * height}",
                expected=width * height,
                actual=len(body),
            )

        tiles = np.frombuffer(bytes(body), dtype=np.uint8)
        return cls(width, height, tiles)

    @classmethod
    def from_file(cls, file_path: str | FilePath) -> "Grid":
        """
        Load a grid from a map file.

        Raises:
            GridFileError: If the file cannot be read
            GridFormatError: If the contents are malformed
        """
        path = FilePath(file_path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise GridFileError(f"Cannot read map file {path}: {e}", path=str(path)) from e
        logger.info(f"Loaded {len(data)} bytes from {path}")
        return cls.from_bytes(data)

    @classmethod
    def from_rows(cls, rows: list[str]) -> "Grid":
        """
        Build a grid from text rows.

        '.' is walkable, '#' blocked, '~' water, '^' cliff. Handy for
        small hand-drawn maps.
        """
        symbols = {
            ".": TileFlag.WALK,
            "#": TileFlag.NONE,
            "~": TileFlag.WATER,
            "^": TileFlag.CLIFF,
        }
        height = len(rows)
        width = len(rows[0]) if rows else 0
        tiles = np.zeros((height, width), dtype=np.uint8)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise GridFormatError(
                    f"Row {y} has {len(row)} tiles, expected {width}",
                    expected=width,
                    actual=len(row),
                )
            for x, char in enumerate(row):
                tiles[y, x] = int(symbols.get(char, TileFlag.NONE))
        return cls(width, height, tiles)

    def to_bytes(self) -> bytes:
        """Encode the grid in map file format."""
        header = bytes([
            self.width & 0xFF, (self.width >> 8) & 0xFF,
            self.height & 0xFF, (self.height >> 8) & 0xFF,
        ])
        return header + self._tiles.tobytes()

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if coordinates are inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        """Get the tile at (x, y), or None if out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return Tile.from_byte(int(self._tiles[y, x]))

    def is_walkable(self, x: int, y: int) -> bool:
        """Whether (x, y) is walkable. Out-of-bounds is never walkable."""
        if not self.in_bounds(x, y):
            return False
        return bool(self._walkable[y, x])

    def walkable_positions(self) -> Iterator[Position]:
        """Yield walkable positions in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                if self._walkable[y, x]:
                    yield Position(x, y)

    @property
    def walkable_count(self) -> int:
        """Number of walkable tiles."""
        return int(np.count_nonzero(self._walkable))

    @property
    def walkable_mask(self) -> np.ndarray:
        """Read-only boolean array of walkability, shape (height, width)."""
        return self._walkable

    def to_ascii(self, path: Optional[Path] = None) -> str:
        """
        Render the grid as ASCII art.

        Args:
            path: Optional path to overlay with '*'

        Returns:
            ASCII representation of the map
        """
        on_path = set(path) if path else set()
        lines = []
        for y in range(self.height):
            line = []
            for x in range(self.width):
                flags = TileFlag(int(self._tiles[y, x]) & 0x0F)
                if Position(x, y) in on_path:
                    line.append("*")
                elif TileFlag.WALK in flags:
                    line.append(".")
                elif TileFlag.WATER in flags:
                    line.append("~")
                elif TileFlag.CLIFF in flags:
                    line.append("^")
                else:
                    line.append("#")
            lines.append("".join(line))
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, walkable={self.walkable_count})"
