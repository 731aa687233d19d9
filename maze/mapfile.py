"""
DroidMaze — maze/mapfile.py
Map text codec: '#' wall, '.' open, 'O' target, ' ' unknown.
"""

from __future__ import annotations

from typing import Dict, Optional

from maze.grid import Coordinate, GridModel, Tile

TILE_GLYPHS: Dict[Tile, str] = {
    Tile.WALL: "#",
    Tile.OPEN: ".",
    Tile.TARGET: "O",
}
UNKNOWN_GLYPH = " "

_GLYPH_TILES: Dict[str, Tile] = {glyph: tile for tile, glyph in TILE_GLYPHS.items()}


class MapParseError(ValueError):
    """Unrecognized character in map text. row/column are 0-based."""

    def __init__(self, row: int, column: int, char: str):
        super().__init__(f"Unrecognized map character {char!r} at row {row}, column {column}")
        self.row = row
        self.column = column
        self.char = char


def parse_map(text: str, origin: Coordinate = (0, 0)) -> GridModel:
    """
    Builds a GridModel from map text.
    The character at row r, column c lands on (origin_x + c, origin_y + r).
    Spaces are left unknown; trailing blank lines are ignored.
    """
    ox, oy = origin
    grid = GridModel()
    lines = text.rstrip("\n").split("\n")
    while lines and not lines[-1].strip():
        lines.pop()

    for row, line in enumerate(lines):
        for column, char in enumerate(line.rstrip("\r")):
            if char == UNKNOWN_GLYPH:
                continue
            tile = _GLYPH_TILES.get(char)
            if tile is None:
                raise MapParseError(row, column, char)
            grid.set((ox + column, oy + row), tile)
    return grid


def format_map(grid: GridModel, overlays: Optional[Dict[Coordinate, str]] = None) -> str:
    """
    Renders the grid's bounding rectangle as map text, one line per row.
    overlays replace the glyph of individual cells (droid marker, solved path).
    """
    if len(grid) == 0:
        return ""
    overlays = overlays or {}
    (min_x, min_y), (max_x, max_y) = grid.bounds()

    rows = []
    for y in range(min_y, max_y + 1):
        chars = []
        for x in range(min_x, max_x + 1):
            if (x, y) in overlays:
                chars.append(overlays[(x, y)])
                continue
            tile = grid.classify((x, y))
            chars.append(UNKNOWN_GLYPH if tile is None else TILE_GLYPHS[tile])
        rows.append("".join(chars))
    return "\n".join(rows)
