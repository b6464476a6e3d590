import dataclasses
import random

import pytest

from supermarket_sim.errors import InvariantViolation
from supermarket_sim.events import DEPARTURE_EVENTS, Event, EventList, EventType, ServicePointType


def test_pop_returns_earliest_first():
    events = EventList()
    later = Event(EventType.ARRIVAL, 30.0)
    earlier = Event(EventType.ENTRANCE_DONE, 10.0)
    middle = Event(EventType.SHOPPING_DONE, 20.0)
    for e in (later, earlier, middle):
        events.push(e)

    assert events.peek_time() == 10.0
    assert [events.pop(), events.pop(), events.pop()] == [earlier, middle, later]
    assert not events


def test_equal_times_pop_in_insertion_order():
    events = EventList()
    pushed = [Event(t, 5.0) for t in EventType]
    for e in pushed:
        events.push(e)

    assert [events.pop() for _ in pushed] == pushed


def test_random_push_sequence_pops_non_decreasing():
    rng = random.Random(0)
    events = EventList()
    for _ in range(500):
        events.push(Event(EventType.ARRIVAL, round(rng.uniform(0, 50), 1)))

    times = [events.pop().time for _ in range(len(events))]
    assert times == sorted(times)


def test_empty_list_is_an_invariant_violation():
    events = EventList()
    with pytest.raises(InvariantViolation):
        events.pop()
    with pytest.raises(InvariantViolation):
        events.peek_time()


def test_clear():
    events = EventList()
    events.push(Event(EventType.ARRIVAL, 1.0))
    events.clear()
    assert len(events) == 0


def test_event_is_frozen_but_can_be_copied():
    event = Event(EventType.ARRIVAL, 1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        event.time = 2.0  # type: ignore[misc]
    moved = dataclasses.replace(event, time=2.0)
    assert moved.time == 2.0 and event.time == 1.0


def test_every_service_point_has_its_own_departure_event():
    assert set(DEPARTURE_EVENTS) == set(ServicePointType)
    assert len(set(DEPARTURE_EVENTS.values())) == len(ServicePointType)
    assert EventType.ARRIVAL not in DEPARTURE_EVENTS.values()


def test_checkout_lanes():
    assert {p for p in ServicePointType if p.is_checkout} == {
        ServicePointType.REGULAR_CHECKOUT,
        ServicePointType.EXPRESS_CHECKOUT,
        ServicePointType.SELF_CHECKOUT,
    }
