"""
DroidMaze — display/renderer.py
TCOD Renderer: draws the discovered grid as a bordered text frame.
=================================================================
Version:     0.1
Stack:       Python 3.11+ | tcod
Status:      Observational only. Never feeds back into the search.
"""

from __future__ import annotations

import time
from typing import Dict, Iterable, Optional, Set, TextIO

import tcod.console

from droid.events import (
    EVT_FILL_ROUND,
    EVT_PATH_SOLVED,
    EVT_STEP_RESOLVED,
    EventBus,
    ProbeEvent,
)
from maze.grid import Coordinate, GridModel
from maze.mapfile import TILE_GLYPHS, UNKNOWN_GLYPH


def console_to_text(console: tcod.console.Console) -> str:
    """Reads a C-ordered console back as newline separated rows."""
    return "\n".join("".join(chr(c) for c in row) for row in console.ch)


class Renderer:
    """
    Draws a GridModel onto a tcod console sized to the grid's bounding box plus a border.
    """
    def __init__(self, droid_glyph: str = "D", path_glyph: str = "*", fill_glyph: str = "O"):
        self.droid_glyph = droid_glyph
        self.path_glyph = path_glyph
        self.fill_glyph = fill_glyph
        self.root_console: Optional[tcod.console.Console] = None

    def draw(
        self,
        grid: GridModel,
        droid: Optional[Coordinate] = None,
        path: Iterable[Coordinate] = (),
        filled: Iterable[Coordinate] = (),
    ) -> tcod.console.Console:
        (min_x, min_y), (max_x, max_y) = grid.bounds()
        width = max_x - min_x + 1
        height = max_y - min_y + 1

        console = tcod.console.Console(width + 2, height + 2, order="C")
        console.clear()

        # Later layers win: fill, then path, then the droid itself.
        overlays: Dict[Coordinate, str] = {}
        for coord in filled:
            overlays[coord] = self.fill_glyph
        for coord in path:
            overlays[coord] = self.path_glyph
        if droid is not None:
            overlays[droid] = self.droid_glyph

        console.print(0, 0, "-" * (width + 2))
        for row, y in enumerate(range(min_y, max_y + 1), start=1):
            cells = []
            for x in range(min_x, max_x + 1):
                if (x, y) in overlays:
                    cells.append(overlays[(x, y)])
                    continue
                tile = grid.classify((x, y))
                cells.append(UNKNOWN_GLYPH if tile is None else TILE_GLYPHS[tile])
            console.print(0, row, "|" + "".join(cells) + "|")
        console.print(0, height + 1, "-" * (width + 2))

        self.root_console = console
        return console

    def render(self, grid: GridModel, **layers) -> str:
        """Draws and returns the frame as text."""
        return console_to_text(self.draw(grid, **layers))


class ConsoleView:
    """
    Event subscriber that prints a frame after every exploration step,
    every flood-fill round and the solved path.
    """
    def __init__(
        self,
        grid: GridModel,
        renderer: Optional[Renderer] = None,
        out: Optional[TextIO] = None,
        frame_delay: float = 0.0,
    ):
        self.grid = grid
        self.renderer = renderer or Renderer()
        self.out = out
        self.frame_delay = frame_delay
        self.filled: Set[Coordinate] = set()
        self.frames = 0

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(EVT_STEP_RESOLVED, self.on_step)
        bus.subscribe(EVT_FILL_ROUND, self.on_fill_round)
        bus.subscribe(EVT_PATH_SOLVED, self.on_path)

    def on_step(self, event: ProbeEvent) -> None:
        self._present(self.renderer.render(self.grid, droid=event.position))

    def on_fill_round(self, event: ProbeEvent) -> None:
        self.filled.update(tuple(c) for c in event.data.get("cells", []))
        self._present(self.renderer.render(self.grid, filled=self.filled))

    def on_path(self, event: ProbeEvent) -> None:
        path = [tuple(c) for c in event.data.get("path", [])]
        self._present(self.renderer.render(self.grid, path=path))

    def _present(self, frame: str) -> None:
        self.frames += 1
        print("", file=self.out)
        print(frame, file=self.out)
        if self.frame_delay:
            time.sleep(self.frame_delay)
