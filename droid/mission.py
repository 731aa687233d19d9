"""
DroidMaze — droid/mission.py
Mission runner: wires oracle, explorer, event bus, searches and rendering.
=========================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2 config | bespoke EventBus
Status:      Public entry points.

Ordering
--------
Exploration must reach DONE before either search runs. Both searches read the
finished grid and never write to it, so a Mission may answer both questions
from a single exploration.
"""

from __future__ import annotations

import logging
from typing import List, Optional, TextIO

from display.renderer import ConsoleView, Renderer
from droid.config import MissionConfig, load_config
from droid.events import EVT_FILL_ROUND, EVT_PATH_SOLVED, EventBus, ProbeEvent
from droid.explorer import ExplorationResult, Explorer, TargetNotFoundError
from droid.oracle import Oracle, oracle_link
from maze.flood import distance_field, fill_rounds
from maze.grid import Coordinate, GridModel, Tile
from maze.mapfile import parse_map
from maze.pathing import astar

logger = logging.getLogger(__name__)


class Mission:
    """
    One droid run against one oracle.
    render=None defers to config.render.

    Both searches read a fully explored grid. config.stop_at_target only
    shortens locate_target(); a later search resumes that run to completion
    over the same oracle instead of starting again.
    """
    def __init__(
        self,
        oracle: Oracle,
        config: Optional[MissionConfig] = None,
        render: Optional[bool] = None,
        out: Optional[TextIO] = None,
    ):
        self.oracle = oracle
        self.config = config if config is not None else load_config()
        self.render = self.config.render if render is None else render
        self.out = out
        self.bus = EventBus()
        self.explorer: Optional[Explorer] = None
        self.result: Optional[ExplorationResult] = None

    def locate_target(self) -> ExplorationResult:
        """Explores until the target is seen if config.stop_at_target is set, else fully."""
        if self.result is None:
            self._drive(stop_at_target=self.config.stop_at_target)
        return self.result

    def explore(self) -> ExplorationResult:
        """Explores the whole reachable grid once; later calls return the cached result."""
        if self.result is None or not self.result.complete:
            self._drive(stop_at_target=False)
        return self.result

    def shortest_path(self) -> List[Coordinate]:
        result = self.explore()
        target = result.require_target()
        path = astar(result.grid, result.origin, target)
        logger.info("Shortest path to target: %d steps", len(path) - 1)
        self.bus.emit(ProbeEvent(
            event_key=EVT_PATH_SOLVED,
            position=target,
            data={"path": [list(c) for c in path]},
        ))
        return path

    def fill_time(self) -> int:
        result = self.explore()
        target = result.require_target()
        return _timed_fill(result.grid, target, self.bus)

    def _drive(self, stop_at_target: bool) -> None:
        with oracle_link(self.oracle) as adapter:
            if self.explorer is None:
                self.explorer = Explorer(adapter, bus=self.bus, stop_at_target=stop_at_target)
                if self.render:
                    self._make_view(self.explorer.grid).attach(self.bus)
            else:
                logger.info("Resuming exploration from %s", self.explorer.position)
                self.explorer.resume(adapter, stop_at_target=stop_at_target)
            self.result = self.explorer.run()

    def _make_view(self, grid: GridModel) -> ConsoleView:
        renderer = Renderer(droid_glyph=self.config.droid_glyph, path_glyph=self.config.path_glyph)
        return ConsoleView(grid, renderer=renderer, out=self.out, frame_delay=self.config.frame_delay)


def _timed_fill(grid: GridModel, source: Coordinate, bus: EventBus) -> int:
    def on_round(index, cells):
        bus.emit(ProbeEvent(
            event_key=EVT_FILL_ROUND,
            position=source,
            data={"round": index, "cells": [list(c) for c in sorted(cells)]},
        ))

    rounds = fill_rounds(grid, source, on_round=on_round)
    logger.info("Flood fill from %s completes in %d rounds", source, rounds)
    if logger.isEnabledFor(logging.DEBUG):
        depth = max(distance_field(grid, source).values())
        logger.debug("Distance field cross-check from %s: depth %d, rounds %d", source, depth, rounds)
    return rounds


# ================================================================================
# PUBLIC ENTRY POINTS
# ================================================================================

def shortest_path_to_target(oracle: Oracle, render: bool = False,
                            config: Optional[MissionConfig] = None) -> int:
    """Fully explores, then returns the step count of a shortest origin -> target path."""
    path = Mission(oracle, config=config, render=render).shortest_path()
    return len(path) - 1


def fill_time(oracle: Oracle, render: bool = False,
              config: Optional[MissionConfig] = None) -> int:
    """Fully explores, then returns the flood-fill round count from the target."""
    return Mission(oracle, config=config, render=render).fill_time()


def fill_time_from_map(text: str, render: bool = False, out: Optional[TextIO] = None) -> int:
    """Flood-fill round count over a map given as text; it must hold exactly one target."""
    grid = parse_map(text)
    targets = grid.find(Tile.TARGET)
    if not targets:
        raise TargetNotFoundError("Map text contains no target tile")
    if len(targets) > 1:
        raise ValueError(f"Map text contains {len(targets)} target tiles, expected one")

    bus = EventBus()
    if render:
        ConsoleView(grid, out=out).attach(bus)
    return _timed_fill(grid, targets[0], bus)
