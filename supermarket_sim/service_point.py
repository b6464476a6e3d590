from __future__ import annotations

# Service point: one stage of the store with a FIFO queue and a single server.
#
# The customer at the head of the queue is the one being served. A service
# point is busy exactly while one departure event is scheduled on its behalf:
# `begin_service()` schedules it and sets busy, `dequeue()` clears busy when
# the model handles that event.

import logging
from collections import deque

from .clock import Clock
from .customer import Customer
from .distributions import Sampler
from .events import DEPARTURE_EVENTS, Event, EventList, ServicePointType
from .service_time import DEFAULT_BASE_TIME, DEFAULT_TIME_PER_ITEM, compute_shopping_time

logger = logging.getLogger(__name__)


class ServicePoint:
    def __init__(
        self,
        point_type: ServicePointType,
        sampler: Sampler,
        event_list: EventList,
        clock: Clock,
        *,
        shopping_base_time: float = DEFAULT_BASE_TIME,
        shopping_time_per_item: float = DEFAULT_TIME_PER_ITEM,
    ) -> None:
        self.point_type = point_type
        self.event_type = DEPARTURE_EVENTS[point_type]
        self.sampler = sampler
        self.event_list = event_list
        self.clock = clock
        self.shopping_base_time = shopping_base_time
        self.shopping_time_per_item = shopping_time_per_item

        self._queue: deque[Customer] = deque()
        self._busy = False

        self.served_count = 0
        self.total_service_time = 0.0
        self.max_queue_length = 0
        self._last_service_start = 0.0

    # -------------------- queue operations --------------------

    def enqueue(self, customer: Customer) -> None:
        self._queue.append(customer)
        self.max_queue_length = max(self.max_queue_length, len(self._queue))

    def dequeue(self) -> Customer | None:
        """Remove the served customer. Returns None if nobody is queued."""
        self._busy = False
        if not self._queue:
            return None
        customer = self._queue.popleft()
        self.served_count += 1
        self.total_service_time += self.clock.now() - self._last_service_start
        return customer

    def begin_service(self) -> Event | None:
        """Start serving the head of the queue and schedule its departure.

        Does nothing when the queue is empty or a customer is already being
        served. The shopping area ignores the sampler: its duration depends on
        the customer's item count.
        """
        if not self._queue or self._busy:
            return None
        self._busy = True

        customer = self._queue[0]
        if self.point_type is ServicePointType.SHOPPING:
            duration = compute_shopping_time(
                items=customer.items,
                base_time=self.shopping_base_time,
                time_per_item=self.shopping_time_per_item,
            )
        else:
            duration = self.sampler()

        now = self.clock.now()
        self._last_service_start = now
        event = Event(self.event_type, now + duration)
        self.event_list.push(event)
        logger.debug(
            "%s: serving customer %d for %.3f (done at %.3f)",
            self.point_type.value,
            customer.id,
            duration,
            event.time,
        )
        return event

    # -------------------- queries --------------------

    def is_busy(self) -> bool:
        return self._busy

    def has_waiting(self) -> bool:
        return bool(self._queue)

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    def mean_service_time(self) -> float:
        if self.served_count == 0:
            return 0.0
        return self.total_service_time / self.served_count

    def utilization(self, elapsed: float) -> float:
        """Share of `elapsed` simulated time spent serving completed customers."""
        if elapsed <= 0:
            return 0.0
        return min(1.0, self.total_service_time / elapsed)

    def reset(self) -> None:
        self._queue.clear()
        self._busy = False
        self.served_count = 0
        self.total_service_time = 0.0
        self.max_queue_length = 0
        self._last_service_start = 0.0

    def __repr__(self) -> str:
        return (
            f"ServicePoint({self.point_type.name}, queue={len(self._queue)}, "
            f"busy={self._busy}, served={self.served_count})"
        )
