from __future__ import annotations

"""Customer arrival stream.

The arrival process is self-perpetuating: the model calls `generate_next()`
once when the run is initialized and once more every time it handles an
ARRIVAL event. If the model ever forgot to reschedule, the store would simply
stop receiving customers while the remaining departures drained.
"""

from .clock import Clock
from .distributions import Sampler
from .events import Event, EventList, EventType


class ArrivalProcess:
    def __init__(
        self,
        sampler: Sampler,
        event_list: EventList,
        clock: Clock,
        event_type: EventType = EventType.ARRIVAL,
    ) -> None:
        self.sampler = sampler
        self.event_list = event_list
        self.clock = clock
        self.event_type = event_type

    def generate_next(self, *, immediate: bool = False) -> Event:
        """Schedule the next arrival and return it.

        Args:
            immediate: schedule at the current time instead of sampling an
                inter-arrival gap. Used for the first customer of a run.
        """
        gap = 0.0 if immediate else self.sampler()
        event = Event(self.event_type, self.clock.now() + gap)
        self.event_list.push(event)
        return event
