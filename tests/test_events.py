import pytest
from pydantic import ValidationError
from droid.events import EVT_STEP_RESOLVED, EVT_TARGET_FOUND, EventBus, ProbeEvent

def test_subscribers_and_wildcard():
    bus = EventBus()
    specific, everything = [], []
    bus.subscribe(EVT_STEP_RESOLVED, specific.append)
    bus.subscribe("*", everything.append)

    bus.emit(ProbeEvent(event_key=EVT_STEP_RESOLVED, position=(0, 1)))
    bus.emit(ProbeEvent(event_key=EVT_TARGET_FOUND, position=(2, 2)))

    assert [e.event_key for e in specific] == [EVT_STEP_RESOLVED]
    assert [e.event_key for e in everything] == [EVT_STEP_RESOLVED, EVT_TARGET_FOUND]

def test_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event):
        seen.append(event)

    bus.subscribe(EVT_STEP_RESOLVED, handler)
    bus.unsubscribe(EVT_STEP_RESOLVED, handler)
    bus.emit(ProbeEvent(event_key=EVT_STEP_RESOLVED))
    assert seen == []

def test_handler_error_does_not_stop_emission(caplog):
    bus = EventBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(EVT_STEP_RESOLVED, broken)
    bus.subscribe(EVT_STEP_RESOLVED, seen.append)
    bus.emit(ProbeEvent(event_key=EVT_STEP_RESOLVED))

    assert len(seen) == 1
    assert "boom" in caplog.text

def test_events_are_frozen():
    event = ProbeEvent(event_key=EVT_STEP_RESOLVED, position=(1, 2), data={"result": "MOVED"})
    with pytest.raises(ValidationError):
        event.event_key = "other"
    assert event.position == (1, 2)
