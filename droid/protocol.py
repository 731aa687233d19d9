"""
DroidMaze — droid/protocol.py
Stepping Protocol: direction codes, reply decoding and the droid <-> oracle channel.
===================================================================================
Version:     0.1
Stack:       Python 3.11+ | queue | threading
Status:      Core protocol layer.

Architecture notes
------------------
- Command codes are fixed: NORTH 1, SOUTH 2, WEST 3, EAST 4.
- Reply codes are fixed: 0 blocked, 1 moved, 2 moved onto the target.
- StepChannel carries exactly one reply per command. The channel tracks the
  outstanding command; a reply sent with nothing outstanding is dropped and
  recorded, and the droid raises ProtocolViolation on its next request() or
  at verify() after the oracle thread has stopped. A duplicate can never be
  read as the answer to a later command.
- A Halt from the oracle where a reply was expected is a ProtocolViolation.
  Violations are fatal and never retried.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Union

from maze.grid import Direction

logger = logging.getLogger(__name__)

COMMAND_CODES: Dict[Direction, int] = {
    Direction.NORTH: 1,
    Direction.SOUTH: 2,
    Direction.WEST: 3,
    Direction.EAST: 4,
}
_DIRECTIONS_BY_CODE: Dict[int, Direction] = {code: d for d, code in COMMAND_CODES.items()}


class StepResult(IntEnum):
    BLOCKED = 0
    MOVED = 1
    MOVED_TO_TARGET = 2


class ProtocolViolation(RuntimeError):
    """The oracle broke the one-command, one-reply contract."""


def encode(direction: Direction) -> int:
    return COMMAND_CODES[direction]


def decode_command(code: int) -> Direction:
    """Oracle side: maps a command code back to its direction."""
    try:
        return _DIRECTIONS_BY_CODE[code]
    except KeyError:
        raise ValueError(f"Unknown command code: {code}") from None


# ── Channel messages ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Output:
    """Oracle -> droid: one reply code."""
    value: int


@dataclass(frozen=True)
class Halt:
    """Oracle -> droid: the oracle stopped and will not answer again."""
    reason: str = ""


OracleMessage = Union[Output, Halt]


class StepChannel:
    """
    Blocking request/response pipe between the droid and an oracle thread.
    The droid calls request(); the oracle side calls next_command() and reply().
    """

    def __init__(self) -> None:
        self._commands: "queue.Queue[Optional[int]]" = queue.Queue(maxsize=1)
        self._replies: "queue.Queue[OracleMessage]" = queue.Queue()
        self._lock = threading.Lock()
        self._awaiting = False
        self._unsolicited = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def unsolicited(self) -> int:
        """Replies the oracle sent while no command was outstanding."""
        return self._unsolicited

    # Droid side

    def request(self, code: int) -> OracleMessage:
        """Sends one command and blocks until its single reply arrives."""
        if self._closed:
            raise ProtocolViolation(f"Cannot send command {code}: channel is closed")
        self._check_unsolicited(f"before command {code}")
        self._commands.put(code)
        message = self._replies.get()
        # The oracle answers in order, so a stray reply to the previous command
        # is always recorded before the reply to this one is queued.
        self._check_unsolicited(f"while waiting on command {code}")
        return message

    def close(self) -> None:
        """Tells the oracle side to stop."""
        if self._closed:
            return
        self._closed = True
        self._commands.put(None)

    def verify(self) -> None:
        """Raises if the oracle ever replied without a command outstanding."""
        self._check_unsolicited("on this channel")

    def _check_unsolicited(self, when: str) -> None:
        if self._unsolicited:
            raise ProtocolViolation(
                f"Unsolicited oracle reply detected {when} ({self._unsolicited} in total)"
            )

    # Oracle side

    def next_command(self) -> Optional[int]:
        """Blocks for the next command. None means the channel was closed."""
        code = self._commands.get()
        if code is not None:
            with self._lock:
                self._awaiting = True
        return code

    def reply(self, message: OracleMessage) -> None:
        """Answers the outstanding command. A second answer is recorded, never delivered."""
        with self._lock:
            if not self._awaiting:
                self._unsolicited += 1
                logger.warning("Dropped oracle reply %r: no command outstanding", message)
                return
            self._awaiting = False
        self._replies.put(message)


class ProtocolAdapter:
    """
    Turns a Direction into a command and the oracle's reply into a StepResult.
    """

    def __init__(self, channel: StepChannel):
        self.channel = channel
        self.commands_sent = 0

    def step(self, direction: Direction) -> StepResult:
        code = encode(direction)
        message = self.channel.request(code)
        self.commands_sent += 1

        if isinstance(message, Halt):
            raise ProtocolViolation(
                f"Expected a reply to command {code}, oracle halted: {message.reason or 'no reason given'}"
            )
        if not isinstance(message, Output):
            raise ProtocolViolation(f"Unexpected oracle message {message!r} to command {code}")
        try:
            result = StepResult(message.value)
        except ValueError:
            raise ProtocolViolation(
                f"Undefined reply code {message.value!r} to command {code}"
            ) from None

        logger.debug("step %s -> %s", direction.value, result.name)
        return result
