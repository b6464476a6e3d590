from __future__ import annotations

# Completed-customer report.
#
# The store model records every customer that leaves a checkout lane here.
# We keep running totals (count, mean time in store, completions per lane)
# and optionally append one CSV row per customer:
#   customer_id,customer_type,arrival_time,removal_time,total_time,items,mean_service_time
# Times are read as minutes and written as hh:mm:ss.

import csv
import logging
import threading
from pathlib import Path
from typing import Any

from .customer import Customer
from .events import ServicePointType

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "customer_id",
    "customer_type",
    "arrival_time",
    "removal_time",
    "total_time",
    "items",
    "mean_service_time",
)


def format_clock(minutes: float) -> str:
    """Format a time in minutes as hh:mm:ss."""
    total_seconds = int(max(0.0, minutes) * 60)
    hours, rest = divmod(total_seconds, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


class CustomerReport:
    def __init__(self, csv_path: str | Path | None = None) -> None:
        self.csv_path = Path(csv_path) if csv_path is not None else None
        self._lock = threading.Lock()
        self.completed = 0
        self.total_time = 0.0
        self.by_lane: dict[ServicePointType, int] = {}

    @property
    def mean_time_in_store(self) -> float:
        if self.completed == 0:
            return 0.0
        return self.total_time / self.completed

    def record(self, customer: Customer, lane: ServicePointType) -> None:
        with self._lock:
            self.completed += 1
            self.total_time += customer.total_time
            self.by_lane[lane] = self.by_lane.get(lane, 0) + 1
            mean = self.mean_time_in_store

        logger.info(
            "customer %d (%s, %d items) completed in %.2f via %s, mean %.2f",
            customer.id,
            customer.type.name,
            customer.items,
            customer.total_time,
            lane.value,
            mean,
        )
        if self.csv_path is not None:
            self._append_row(customer, mean)

    def _append_row(self, customer: Customer, mean: float) -> None:
        new_file = not self.csv_path.exists()
        with self.csv_path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if new_file:
                writer.writerow(CSV_HEADER)
            writer.writerow(
                [
                    customer.id,
                    customer.type.name,
                    format_clock(customer.arrival_time),
                    format_clock(customer.removal_time or 0.0),
                    format_clock(customer.total_time),
                    customer.items,
                    int(mean),
                ]
            )

    def reset(self) -> None:
        """Clear the totals and truncate the CSV file if there is one."""
        with self._lock:
            self.completed = 0
            self.total_time = 0.0
            self.by_lane = {}
        if self.csv_path is not None and self.csv_path.exists():
            self.csv_path.unlink()
            logger.debug("removed previous report %s", self.csv_path)

    def summary(self) -> dict[str, Any]:
        with self._lock:
            return {
                "completed": self.completed,
                "mean_time_in_store": self.mean_time_in_store,
                "by_lane": {lane.value: n for lane, n in self.by_lane.items()},
            }
