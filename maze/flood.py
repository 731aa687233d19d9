"""
DroidMaze — maze/flood.py
Flood-Fill Timer: round-synchronous BFS spreading from a source cell.
====================================================================
Version:     0.1
Stack:       Python 3.11+ | NumPy | tcod.path
Status:      Core search. Pure; never mutates the grid.

Round 0 is the source alone. Each round adds every traversable neighbour of
the previous round that has not been reached yet. The answer is the number of
non-empty rounds after round 0, so an isolated source fills in 0 rounds.

distance_field() is an independent reference computation over the same grid
(tcod Dijkstra with cardinal cost 1). Its maximum equals fill_rounds().
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Set

import numpy as np
import tcod.path

from maze.grid import Coordinate, GridModel

logger = logging.getLogger(__name__)

RoundFn = Callable[[int, Set[Coordinate]], None]


def fill_rounds(grid: GridModel, start: Coordinate, on_round: Optional[RoundFn] = None) -> int:
    """
    Counts the rounds needed to reach every traversable cell connected to start.
    on_round(index, frontier) is called after each non-empty round.
    """
    if not grid.is_traversable(start):
        raise ValueError(f"Flood source {start} must be an open or target cell")

    visited: Set[Coordinate] = {start}
    frontier: Set[Coordinate] = {start}
    rounds = 0

    while frontier:
        next_frontier: Set[Coordinate] = set()
        for coord in frontier:
            for _, neighbour in grid.neighbours(coord):
                if neighbour in visited or not grid.is_traversable(neighbour):
                    continue
                next_frontier.add(neighbour)
        if not next_frontier:
            break
        visited |= next_frontier
        frontier = next_frontier
        rounds += 1
        if on_round is not None:
            on_round(rounds, frontier)

    logger.debug("fill_rounds: %d cells reached from %s in %d rounds", len(visited), start, rounds)
    return rounds


def distance_field(grid: GridModel, source: Coordinate) -> Dict[Coordinate, int]:
    """
    Step distance from source to every reachable traversable cell.
    Unreachable cells are left out of the result.
    """
    if not grid.is_traversable(source):
        raise ValueError(f"Distance source {source} must be an open or target cell")

    (min_x, min_y), (max_x, max_y) = grid.bounds()
    width = max_x - min_x + 1
    height = max_y - min_y + 1

    # NumPy uses (y, x); cost 0 marks a blocked cell.
    cost = np.zeros((height, width), dtype=np.int32)
    for (x, y) in grid:
        if grid.is_traversable((x, y)):
            cost[y - min_y, x - min_x] = 1

    unreachable = np.iinfo(np.int32).max
    dist = tcod.path.maxarray((height, width), dtype=np.int32)
    dist[source[1] - min_y, source[0] - min_x] = 0
    tcod.path.dijkstra2d(dist, cost, cardinal=1, diagonal=0, out=dist)

    ys, xs = np.nonzero(dist != unreachable)
    return {
        (int(x) + min_x, int(y) + min_y): int(dist[y, x])
        for y, x in zip(ys, xs)
    }
