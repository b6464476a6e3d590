from __future__ import annotations

# Notifications from the simulation worker to the outside world.
#
# The engine runs on its own thread and must never touch UI state directly.
# Everything it wants to tell observers goes through a `Notifier`:
# - `Notifier` itself ignores everything (useful default / base class)
# - `QueueNotifier` hands notifications to another thread through a Queue
#   (the Tkinter dashboard drains it with `root.after(...)`)
# - `ConsoleNotifier` prints a line per notification for headless runs
# - `FanoutNotifier` forwards to several notifiers in order
#
# Implementations must not block the worker.

import queue
from dataclasses import dataclass
from typing import Any

from .customer import CustomerSnapshot
from .events import ServicePointType


class Notifier:
    def on_customer_created(self, customer: CustomerSnapshot) -> None:
        pass

    def on_customer_moved(self, customer_id: int, from_stage: ServicePointType, to_stage: ServicePointType) -> None:
        pass

    def on_customer_completed(self, customer_id: int, final_stage: ServicePointType) -> None:
        pass

    def on_simulation_ended(self, final_time: float) -> None:
        pass

    def on_time_remaining_estimate(self, seconds_left: int | None) -> None:
        """`seconds_left` is None when no estimate is available."""


@dataclass(frozen=True)
class Notification:
    kind: str
    args: tuple[Any, ...]


class QueueNotifier(Notifier):
    """Put every notification on an unbounded queue, in submission order."""

    def __init__(self, inbox: "queue.Queue[Notification] | None" = None) -> None:
        self.inbox: "queue.Queue[Notification]" = inbox if inbox is not None else queue.Queue()

    def _put(self, kind: str, *args: Any) -> None:
        self.inbox.put_nowait(Notification(kind, args))

    def on_customer_created(self, customer: CustomerSnapshot) -> None:
        self._put("customer_created", customer)

    def on_customer_moved(self, customer_id: int, from_stage: ServicePointType, to_stage: ServicePointType) -> None:
        self._put("customer_moved", customer_id, from_stage, to_stage)

    def on_customer_completed(self, customer_id: int, final_stage: ServicePointType) -> None:
        self._put("customer_completed", customer_id, final_stage)

    def on_simulation_ended(self, final_time: float) -> None:
        self._put("simulation_ended", final_time)

    def on_time_remaining_estimate(self, seconds_left: int | None) -> None:
        self._put("time_remaining", seconds_left)

    def drain(self) -> list[Notification]:
        """Return everything queued so far without blocking."""
        items: list[Notification] = []
        while True:
            try:
                items.append(self.inbox.get_nowait())
            except queue.Empty:
                return items


class ConsoleNotifier(Notifier):
    """Print simulation progress (headless `run`)."""

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def on_customer_created(self, customer: CustomerSnapshot) -> None:
        if self.verbose:
            print(
                f"[sim] t={customer.arrival_time:0.2f} customer {customer.customer_id} "
                f"({customer.customer_type.name}, items={customer.items}) arrived"
            )

    def on_customer_moved(self, customer_id: int, from_stage: ServicePointType, to_stage: ServicePointType) -> None:
        if self.verbose:
            print(f"[sim] customer {customer_id}: {from_stage.value} -> {to_stage.value}")

    def on_customer_completed(self, customer_id: int, final_stage: ServicePointType) -> None:
        if self.verbose:
            print(f"[sim] customer {customer_id} left via {final_stage.value}")

    def on_simulation_ended(self, final_time: float) -> None:
        print(f"[sim] simulation ended at t={final_time:0.2f}")

    def on_time_remaining_estimate(self, seconds_left: int | None) -> None:
        if self.verbose and seconds_left is not None:
            print(f"[sim] ~{seconds_left}s left")


class FanoutNotifier(Notifier):
    def __init__(self, *notifiers: Notifier) -> None:
        self.notifiers = list(notifiers)

    def on_customer_created(self, customer: CustomerSnapshot) -> None:
        for n in self.notifiers:
            n.on_customer_created(customer)

    def on_customer_moved(self, customer_id: int, from_stage: ServicePointType, to_stage: ServicePointType) -> None:
        for n in self.notifiers:
            n.on_customer_moved(customer_id, from_stage, to_stage)

    def on_customer_completed(self, customer_id: int, final_stage: ServicePointType) -> None:
        for n in self.notifiers:
            n.on_customer_completed(customer_id, final_stage)

    def on_simulation_ended(self, final_time: float) -> None:
        for n in self.notifiers:
            n.on_simulation_ended(final_time)

    def on_time_remaining_estimate(self, seconds_left: int | None) -> None:
        for n in self.notifiers:
            n.on_time_remaining_estimate(seconds_left)
