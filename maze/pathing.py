"""
DroidMaze — maze/pathing.py
A* shortest path over a fully explored grid.
=============================================
Version:     0.1
Stack:       Python 3.11+ | heapq
Status:      Core search. Pure; never mutates the grid.

Unit edge costs with a Manhattan heuristic. The heuristic is consistent for
cardinal moves, so the first time the target is popped its cost is minimal.
Unknown coordinates are not neighbours; run this only after exploration is done.
"""

from __future__ import annotations

import heapq
import logging
from itertools import count
from typing import Dict, List, Optional

from maze.grid import Coordinate, GridModel, manhattan

logger = logging.getLogger(__name__)


class PathfindingError(Exception):
    """Base class for shortest path failures."""


class InvalidEndpointError(PathfindingError):
    """Origin or target is not a traversable, classified cell."""


class NoPathError(PathfindingError):
    """Target cannot be reached from origin without crossing a wall."""

    def __init__(self, origin: Coordinate, target: Coordinate):
        super().__init__(f"No path from {origin} to {target}")
        self.origin = origin
        self.target = target


def astar(grid: GridModel, origin: Coordinate, target: Coordinate) -> List[Coordinate]:
    """
    Returns the coordinates of a shortest path from origin to target, both inclusive.
    Raises InvalidEndpointError for a wall or unknown endpoint and NoPathError
    when the target is walled off.
    """
    for name, coord in (("origin", origin), ("target", target)):
        if not grid.is_traversable(coord):
            raise InvalidEndpointError(
                f"{name} {coord} must be an open or target cell, got {grid.classify(coord)}"
            )

    tie = count()
    open_heap = [(manhattan(origin, target), next(tie), origin)]
    g_cost: Dict[Coordinate, int] = {origin: 0}
    came_from: Dict[Coordinate, Optional[Coordinate]] = {origin: None}
    closed = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == target:
            path = _reconstruct(came_from, current)
            logger.debug("astar: %s -> %s in %d steps (%d expanded)",
                         origin, target, len(path) - 1, len(closed))
            return path
        closed.add(current)

        for _, neighbour in grid.neighbours(current):
            if neighbour in closed or not grid.is_traversable(neighbour):
                continue
            tentative = g_cost[current] + 1
            if tentative < g_cost.get(neighbour, tentative + 1):
                g_cost[neighbour] = tentative
                came_from[neighbour] = current
                heapq.heappush(
                    open_heap,
                    (tentative + manhattan(neighbour, target), next(tie), neighbour),
                )

    raise NoPathError(origin, target)


def shortest_path_length(grid: GridModel, origin: Coordinate, target: Coordinate) -> int:
    """Number of moves on a shortest path (path length minus one)."""
    return len(astar(grid, origin, target)) - 1


def _reconstruct(came_from: Dict[Coordinate, Optional[Coordinate]], end: Coordinate) -> List[Coordinate]:
    path = [end]
    prev = came_from[end]
    while prev is not None:
        path.append(prev)
        prev = came_from[prev]
    path.reverse()
    return path
