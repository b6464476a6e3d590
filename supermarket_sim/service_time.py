from __future__ import annotations

# Shopping time.
#
# Time spent in the shopping area does not come from the configured service
# distribution. It grows with the basket:
#   shopping_time = base_time + time_per_item * items
#
# This gives you:
# - a fixed overhead (finding a cart, walking the aisles)
# - a per-item picking time

DEFAULT_BASE_TIME = 10.0
DEFAULT_TIME_PER_ITEM = 2.0


def compute_shopping_time(
    *,
    items: int,
    base_time: float = DEFAULT_BASE_TIME,
    time_per_item: float = DEFAULT_TIME_PER_ITEM,
) -> float:
    """Compute how long a customer spends picking their items.

    Args:
        items: number of items in the basket (>= 0).
        base_time: fixed overhead (>= 0).
        time_per_item: time per picked item (>= 0).

    Returns:
        Non-negative float.
    """
    if items < 0:
        raise ValueError("items must be >= 0")
    if base_time < 0:
        raise ValueError("base_time must be >= 0")
    if time_per_item < 0:
        raise ValueError("time_per_item must be >= 0")

    return float(base_time + time_per_item * items)
