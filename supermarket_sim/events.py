"""Events and the event list.

An `Event` is a frozen (type, time) pair. The `EventList` is a binary heap
keyed by `(time, sequence)`: the sequence number is taken at push time, so
events scheduled for the same instant come out in the order they were pushed.
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from enum import Enum

from .errors import InvariantViolation


class EventType(Enum):
    ARRIVAL = "arrival"
    ENTRANCE_DONE = "entrance_done"
    SHOPPING_DONE = "shopping_done"
    REGULAR_CHECKOUT_DONE = "regular_checkout_done"
    EXPRESS_CHECKOUT_DONE = "express_checkout_done"
    SELF_CHECKOUT_DONE = "self_checkout_done"


class ServicePointType(Enum):
    ENTRANCE = "entrance"
    SHOPPING = "shopping"
    REGULAR_CHECKOUT = "regular_checkout"
    EXPRESS_CHECKOUT = "express_checkout"
    SELF_CHECKOUT = "self_checkout"

    @property
    def is_checkout(self) -> bool:
        return self in CHECKOUTS


CHECKOUTS = frozenset(
    {
        ServicePointType.REGULAR_CHECKOUT,
        ServicePointType.EXPRESS_CHECKOUT,
        ServicePointType.SELF_CHECKOUT,
    }
)

# Event a service point schedules when it finishes serving a customer.
DEPARTURE_EVENTS: dict[ServicePointType, EventType] = {
    ServicePointType.ENTRANCE: EventType.ENTRANCE_DONE,
    ServicePointType.SHOPPING: EventType.SHOPPING_DONE,
    ServicePointType.REGULAR_CHECKOUT: EventType.REGULAR_CHECKOUT_DONE,
    ServicePointType.EXPRESS_CHECKOUT: EventType.EXPRESS_CHECKOUT_DONE,
    ServicePointType.SELF_CHECKOUT: EventType.SELF_CHECKOUT_DONE,
}


@dataclass(frozen=True)
class Event:
    type: EventType
    time: float


class EventList:
    """Pending events, earliest first."""

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, Event]] = []
        self._seq = itertools.count()

    def push(self, event: Event) -> None:
        heapq.heappush(self._heap, (event.time, next(self._seq), event))

    def pop(self) -> Event:
        if not self._heap:
            raise InvariantViolation("pop from an empty event list")
        return heapq.heappop(self._heap)[2]

    def peek_time(self) -> float:
        if not self._heap:
            raise InvariantViolation("peek into an empty event list")
        return self._heap[0][0]

    def clear(self) -> None:
        self._heap.clear()
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
