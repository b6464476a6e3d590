from supermarket_sim.arrival import ArrivalProcess
from supermarket_sim.clock import Clock
from supermarket_sim.events import EventList, EventType


def test_generate_next_schedules_after_sampled_gap():
    clock = Clock()
    clock.advance_to(3.0)
    events = EventList()
    process = ArrivalProcess(lambda: 2.5, events, clock)

    event = process.generate_next()

    assert event.type is EventType.ARRIVAL
    assert event.time == 5.5
    assert len(events) == 1
    assert events.pop() == event


def test_immediate_arrival_uses_current_time():
    clock = Clock()
    events = EventList()
    process = ArrivalProcess(lambda: 99.0, events, clock)

    process.generate_next(immediate=True)

    assert events.peek_time() == 0.0
