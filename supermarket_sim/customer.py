from __future__ import annotations

# Customer entity.
#
# A customer lives from its ARRIVAL event until it leaves a checkout lane:
# - created by the store model with an id, a type and a basket size
# - stamped once per stage transition (shopping start/end, checkout start, removal)
# - dropped from tracking after its final departure
#
# Observers never get the live object, only a frozen `CustomerSnapshot`.

import random
from dataclasses import dataclass
from enum import Enum

from .errors import InvariantViolation
from .events import ServicePointType


class CustomerType(Enum):
    REGULAR = "regular"
    EXPRESS = "express"


@dataclass(frozen=True)
class CustomerSnapshot:
    customer_id: int
    customer_type: CustomerType
    items: int
    arrival_time: float
    location: ServicePointType | None

    def to_message(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "customer_type": self.customer_type.value,
            "items": self.items,
            "arrival_time": self.arrival_time,
            "location": self.location.value if self.location else None,
        }


class Customer:
    def __init__(
        self,
        customer_id: int,
        customer_type: CustomerType,
        items: int,
        arrival_time: float,
    ) -> None:
        if items < 1:
            raise ValueError("items must be >= 1")
        self.id = customer_id
        self.type = customer_type
        self.items = items
        self.arrival_time = float(arrival_time)

        self.shopping_start: float | None = None
        self.shopping_end: float | None = None
        self.checkout_start: float | None = None
        self.removal_time: float | None = None

        self.current_location: ServicePointType | None = ServicePointType.ENTRANCE
        self.previous_location: ServicePointType | None = None

    @property
    def is_express(self) -> bool:
        return self.type is CustomerType.EXPRESS

    def move_to(self, location: ServicePointType) -> None:
        self.previous_location = self.current_location
        self.current_location = location

    # -------------------- stage timestamps --------------------

    def start_shopping(self, now: float) -> None:
        self.shopping_start = self._stamp("shopping_start", now)

    def end_shopping(self, now: float) -> None:
        self.shopping_end = self._stamp("shopping_end", now)

    def start_checkout(self, now: float) -> None:
        self.checkout_start = self._stamp("checkout_start", now)

    def mark_removed(self, now: float) -> None:
        self.removal_time = self._stamp("removal_time", now)

    def _stamp(self, name: str, now: float) -> float:
        if getattr(self, name) is not None:
            raise InvariantViolation(f"customer {self.id}: {name} already set")
        return float(now)

    # -------------------- durations --------------------

    @property
    def shopping_duration(self) -> float:
        if self.shopping_start is None or self.shopping_end is None:
            return 0.0
        return self.shopping_end - self.shopping_start

    @property
    def checkout_duration(self) -> float:
        if self.checkout_start is None or self.removal_time is None:
            return 0.0
        return self.removal_time - self.checkout_start

    @property
    def total_time(self) -> float:
        """Time from arrival to leaving the store (0 while still inside)."""
        if self.removal_time is None:
            return 0.0
        return self.removal_time - self.arrival_time

    def snapshot(self) -> CustomerSnapshot:
        return CustomerSnapshot(
            customer_id=self.id,
            customer_type=self.type,
            items=self.items,
            arrival_time=self.arrival_time,
            location=self.current_location,
        )

    def __repr__(self) -> str:
        return f"Customer(id={self.id}, type={self.type.name}, items={self.items})"


def draw_customer_profile(
    *,
    express_percentage: float,
    regular_items: tuple[int, int],
    express_items: tuple[int, int],
    rng: random.Random | None = None,
) -> tuple[CustomerType, int]:
    """Pick a customer type and basket size.

    The customer is EXPRESS with probability `express_percentage / 100`. The
    item count is uniform over the inclusive range configured for the type.
    """
    r = rng or random
    if express_percentage > 0 and r.random() * 100 < express_percentage:
        lo, hi = express_items
        return CustomerType.EXPRESS, r.randint(lo, hi)
    lo, hi = regular_items
    return CustomerType.REGULAR, r.randint(lo, hi)
