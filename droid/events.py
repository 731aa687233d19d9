"""
DroidMaze — droid/events.py
Event Bus: observer hook for exploration and flood-fill progress.
=================================================================
Version:     0.1
Stack:       Python 3.11+ | Pydantic v2 | bespoke pub-sub
Status:      Production-ready. No search logic here.

Architecture notes
------------------
- The explorer and the mission runner emit; renderers subscribe. Nothing that
  subscribes may feed state back into the search.
- All events are frozen Pydantic models. data must stay flat and JSON-serializable.
- Wildcard key "*" receives every emitted event.
- Handler errors are logged and swallowed so emission always continues; a
  broken observer can never desynchronise the droid from its oracle.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here only.
# ============================================================

EVT_PLAN_SELECTED       = "probe.plan_selected"
EVT_STEP_RESOLVED       = "probe.step_resolved"
EVT_TARGET_FOUND        = "probe.target_found"
EVT_EXPLORATION_DONE    = "probe.exploration_done"
EVT_FILL_ROUND          = "fill.round_completed"
EVT_PATH_SOLVED         = "path.solved"

WILDCARD = "*"


class ProbeEvent(BaseModel):
    """Envelope for every emitted event."""
    model_config = ConfigDict(frozen=True)

    event_key: str
    position: Optional[Tuple[int, int]] = None
    data: Dict[str, Any] = Field(default_factory=dict)


HandlerFn = Callable[[ProbeEvent], None]


class EventBus:
    """
    Bespoke pub-sub. Pass an instance at construction; there is no global bus.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h is not handler
            ]

    def emit(self, event: ProbeEvent) -> None:
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get(WILDCARD, [])
        )
        for handler in targets:
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                logger.warning("[EventBus] Handler error on '%s': %s", event.event_key, exc)
