"""
DroidMaze — droid/explorer.py
Maze Explorer: move-and-observe discovery of an unknown grid.
=============================================================
Version:     0.1
Stack:       Python 3.11+ | collections.deque
Status:      Core exploration engine.

State machine
-------------
  PLANNING  no pending path. Search the known grid for the nearest unknown
            cell; none left means DONE, otherwise the shortest route becomes
            the pending path and the explorer switches to WALKING.
  WALKING   pop one direction, send it, fold the reply into the grid.
            An emptied path switches back to PLANNING.
  DONE      terminal. The grid is final and read-only from here on.

Invariant: position always equals the oracle's true position. Every command is
reconciled with its reply (tile recorded, position updated) before the next
command goes out. The adapter blocks, so there is no other code path.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from droid.events import (
    EVT_EXPLORATION_DONE,
    EVT_PLAN_SELECTED,
    EVT_STEP_RESOLVED,
    EVT_TARGET_FOUND,
    EventBus,
    ProbeEvent,
)
from droid.protocol import ProtocolAdapter, StepResult
from maze.grid import Coordinate, Direction, GridModel, Tile

logger = logging.getLogger(__name__)

Path = List[Direction]


class ExplorerState(Enum):
    PLANNING = "planning"
    WALKING = "walking"
    DONE = "done"


class TargetNotFoundError(RuntimeError):
    """Exploration finished without ever observing the target tile."""


@dataclass
class ExplorationResult:
    grid: GridModel
    origin: Coordinate
    position: Coordinate
    target: Optional[Coordinate]
    steps: int
    complete: bool = True

    def require_target(self) -> Coordinate:
        if self.target is None:
            raise TargetNotFoundError(
                f"Target not found after {self.steps} steps over {len(self.grid)} observed cells"
            )
        return self.target


def frontier_paths(grid: GridModel, start: Coordinate) -> List[Path]:
    """
    One shortest direction sequence per reachable unknown cell, shortest first.

    Breadth-first over path prefixes: only known traversable cells are crossed,
    walls are never entered and each cell is visited once. Every returned path
    ends with the single step from a known cell into an unknown one.
    """
    seen = {start}
    queue: Deque[tuple[Coordinate, Path]] = deque([(start, [])])
    paths: List[Path] = []

    while queue:
        coord, prefix = queue.popleft()
        for direction, neighbour in grid.neighbours(coord):
            if neighbour in seen:
                continue
            tile = grid.classify(neighbour)
            if tile is Tile.WALL:
                continue
            seen.add(neighbour)
            path = prefix + [direction]
            if tile is None:
                paths.append(path)
            else:
                queue.append((neighbour, path))
    return paths


class Explorer:
    """
    Drives a ProtocolAdapter until no reachable unknown cell is left.

    stop_at_target ends exploration as soon as the target tile is observed;
    the result is then marked incomplete and resume() can finish the map.
    bus, when given, receives a ProbeEvent after every state transition.
    """

    def __init__(
        self,
        adapter: ProtocolAdapter,
        origin: Coordinate = (0, 0),
        bus: Optional[EventBus] = None,
        stop_at_target: bool = False,
    ):
        self.adapter = adapter
        self.bus = bus
        self.stop_at_target = stop_at_target

        self.grid = GridModel()
        self.origin = origin
        self.position = origin
        self.target: Optional[Coordinate] = None
        self.path: Deque[Direction] = deque()
        self.state = ExplorerState.PLANNING
        self.steps = 0
        self.complete = False

        # The droid stands here, so it cannot be a wall.
        self.grid.set(origin, Tile.OPEN)

    @property
    def done(self) -> bool:
        return self.state is ExplorerState.DONE

    def run(self) -> ExplorationResult:
        while not self.done:
            self.tick()
        return self.result()

    def resume(self, adapter: ProtocolAdapter, stop_at_target: bool = False) -> None:
        """
        Continues over a new adapter to the same oracle, from the current position.
        A run that stopped at the target goes back to PLANNING; a complete one
        stays DONE.
        """
        self.adapter = adapter
        self.stop_at_target = stop_at_target
        if self.done and not self.complete:
            self.state = ExplorerState.PLANNING

    def result(self) -> ExplorationResult:
        return ExplorationResult(
            grid=self.grid,
            origin=self.origin,
            position=self.position,
            target=self.target,
            steps=self.steps,
            complete=self.complete,
        )

    def tick(self) -> ExplorerState:
        """Performs one transition and returns the new state."""
        if self.state is ExplorerState.PLANNING:
            self._plan()
        elif self.state is ExplorerState.WALKING:
            self._walk()
        return self.state

    def _plan(self) -> None:
        candidates = frontier_paths(self.grid, self.position)
        if not candidates:
            self.complete = True
            self._finish()
            return

        # BFS order: the first minimum wins ties.
        shortest = min(candidates, key=len)
        self.path = deque(shortest)
        self.state = ExplorerState.WALKING
        self._emit(EVT_PLAN_SELECTED, {
            "length": len(shortest),
            "candidates": len(candidates),
        })

    def _walk(self) -> None:
        direction = self.path.popleft()
        candidate = direction.step(self.position)
        result = self.adapter.step(direction)
        self.steps += 1

        if result is StepResult.BLOCKED:
            self.grid.set(candidate, Tile.WALL)
        elif result is StepResult.MOVED:
            self.grid.set(candidate, Tile.OPEN)
            self.position = candidate
        else:
            self.grid.set(candidate, Tile.TARGET)
            self.position = candidate
            if self.target is None:
                self.target = candidate
                logger.info("Target found at %s after %d steps", candidate, self.steps)
                self._emit(EVT_TARGET_FOUND, {"steps": self.steps})

        self._emit(EVT_STEP_RESOLVED, {
            "direction": direction.value,
            "result": result.name,
            "cell": list(candidate),
        })

        if self.stop_at_target and self.target is not None:
            self._finish()
        elif not self.path:
            self.state = ExplorerState.PLANNING

    def _finish(self) -> None:
        self.path.clear()
        self.state = ExplorerState.DONE
        logger.info("Exploration done: %d steps, %d cells observed", self.steps, len(self.grid))
        self._emit(EVT_EXPLORATION_DONE, {
            "steps": self.steps,
            "observed": len(self.grid),
            "target_found": self.target is not None,
            "complete": self.complete,
        })

    def _emit(self, event_key: str, data: dict) -> None:
        if self.bus is not None:
            self.bus.emit(ProbeEvent(event_key=event_key, position=self.position, data=data))
