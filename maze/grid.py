"""
DroidMaze — maze/grid.py
Grid Model: sparse, insert-only tile map over an unbounded integer plane.
=========================================================================
Version:     0.1
Stack:       Python 3.11+ | stdlib
Status:      Core data layer. No search logic belongs here.

Architecture notes
------------------
- Coordinates are plain (x, y) tuples. North is y - 1, south is y + 1.
- A coordinate missing from the grid is UNKNOWN, which is not the same as WALL.
  classify() returns None for it.
- Classifications are write-once. A second set() with a different tile is a
  logic error (GridConflictError). The grid never shrinks.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

Coordinate = Tuple[int, int]
Bounds = Tuple[Coordinate, Coordinate]


class Tile(Enum):
    OPEN = "open"
    WALL = "wall"
    TARGET = "target"


class Direction(Enum):
    NORTH = "north"
    SOUTH = "south"
    WEST = "west"
    EAST = "east"

    @property
    def offset(self) -> Coordinate:
        return _OFFSETS[self]

    def step(self, coord: Coordinate) -> Coordinate:
        """Returns the coordinate one cell away from coord in this direction."""
        dx, dy = _OFFSETS[self]
        return (coord[0] + dx, coord[1] + dy)


_OFFSETS: Dict[Direction, Coordinate] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
    Direction.EAST: (1, 0),
}

# Enumeration order for every neighbour walk in the project.
CARDINALS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.SOUTH,
    Direction.WEST,
    Direction.EAST,
)


class GridConflictError(ValueError):
    """Raised when a classified coordinate is re-classified differently."""

    def __init__(self, coord: Coordinate, existing: Tile, attempted: Tile):
        super().__init__(
            f"Coordinate {coord} is already {existing.value}, cannot become {attempted.value}"
        )
        self.coord = coord
        self.existing = existing
        self.attempted = attempted


def manhattan(a: Coordinate, b: Coordinate) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class GridModel:
    """
    Mapping from Coordinate to Tile for every observed cell.
    """

    def __init__(self, tiles: Optional[Dict[Coordinate, Tile]] = None):
        self._tiles: Dict[Coordinate, Tile] = {}
        if tiles:
            for coord, tile in tiles.items():
                self.set(coord, tile)

    def classify(self, coord: Coordinate) -> Optional[Tile]:
        """Returns the tile at coord, or None when it has not been observed."""
        return self._tiles.get(coord)

    def set(self, coord: Coordinate, tile: Tile) -> None:
        existing = self._tiles.get(coord)
        if existing is None:
            self._tiles[coord] = tile
        elif existing is not tile:
            raise GridConflictError(coord, existing, tile)

    def bounds(self) -> Bounds:
        """Smallest rectangle ((min_x, min_y), (max_x, max_y)) covering every observed cell."""
        if not self._tiles:
            raise ValueError("Cannot compute bounds of an empty grid")
        xs = [x for x, _ in self._tiles]
        ys = [y for _, y in self._tiles]
        return (min(xs), min(ys)), (max(xs), max(ys))

    def is_traversable(self, coord: Coordinate) -> bool:
        """True for OPEN and TARGET cells. Walls and unknown cells are not traversable."""
        tile = self._tiles.get(coord)
        return tile is Tile.OPEN or tile is Tile.TARGET

    def neighbours(self, coord: Coordinate) -> Iterator[Tuple[Direction, Coordinate]]:
        for direction in CARDINALS:
            yield direction, direction.step(coord)

    def find(self, tile: Tile) -> List[Coordinate]:
        return [coord for coord, t in self._tiles.items() if t is tile]

    def snapshot(self) -> "GridModel":
        """Independent copy, safe to hand to read-only consumers."""
        copy = GridModel()
        copy._tiles = dict(self._tiles)
        return copy

    def items(self):
        return self._tiles.items()

    def __contains__(self, coord: object) -> bool:
        return coord in self._tiles

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._tiles)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridModel):
            return NotImplemented
        return self._tiles == other._tiles

    def __repr__(self) -> str:
        return f"GridModel({len(self._tiles)} tiles)"
