"""
DroidMaze — droid/oracle.py
Simulated stepping oracle and the thread that serves it over a StepChannel.
===========================================================================
Version:     0.1
Stack:       Python 3.11+ | threading
Status:      Test and CLI stand-in for the real oracle process.

MapOracle answers movement commands against a known ground-truth maze. Its
position lives in map coordinates, while the explorer counts from its own origin
(0, 0). The two never share state; the channel is the only link.
Cells outside the map (unknown in the ground truth) answer as walls.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Protocol

from droid.protocol import (
    Halt,
    Output,
    ProtocolAdapter,
    ProtocolViolation,
    StepChannel,
    StepResult,
    decode_command,
)
from maze.grid import Coordinate, GridModel, Tile

logger = logging.getLogger(__name__)


class Oracle(Protocol):
    def respond(self, code: int) -> int:
        """Consumes one command code and returns one reply code."""
        ...


class MapOracle:
    """
    Ground-truth oracle backed by a GridModel.
    """

    def __init__(self, truth: GridModel, start: Coordinate):
        if not truth.is_traversable(start):
            raise ValueError(f"Oracle start {start} is not an open cell of the map")
        self.truth = truth
        self.position = start
        self.moves = 0

    def respond(self, code: int) -> int:
        candidate = decode_command(code).step(self.position)
        tile = self.truth.classify(candidate)
        if tile is None or tile is Tile.WALL:
            return StepResult.BLOCKED.value
        self.position = candidate
        self.moves += 1
        if tile is Tile.TARGET:
            return StepResult.MOVED_TO_TARGET.value
        return StepResult.MOVED.value


class OracleThread(threading.Thread):
    """
    Serves one oracle on a channel until the channel closes.
    An exception inside the oracle is reported to the droid as a Halt.
    """

    def __init__(self, oracle: Oracle, channel: StepChannel):
        super().__init__(name="oracle", daemon=True)
        self.oracle = oracle
        self.channel = channel

    def run(self) -> None:
        while True:
            code = self.channel.next_command()
            if code is None:
                break
            try:
                value = self.oracle.respond(code)
            except Exception as exc:  # noqa: BLE001
                logger.error("Oracle failed on command %s: %s", code, exc)
                self.channel.reply(Halt(reason=str(exc)))
                break
            self.channel.reply(Output(value))


@contextmanager
def oracle_link(oracle: Oracle) -> Iterator[ProtocolAdapter]:
    """
    Starts an oracle thread and yields the droid-side adapter for it.
    On exit the channel closes, the thread is joined and any stray reply is
    raised as a ProtocolViolation. If the body already failed, the stray reply
    is only logged so the original error propagates.
    """
    channel = StepChannel()
    worker = OracleThread(oracle, channel)
    worker.start()
    clean = False
    try:
        yield ProtocolAdapter(channel)
        clean = True
    finally:
        channel.close()
        worker.join()
        try:
            channel.verify()
        except ProtocolViolation as exc:
            if clean:
                raise
            logger.error("Oracle link closed after an error; also saw: %s", exc)
