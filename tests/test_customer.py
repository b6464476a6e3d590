import random

import pytest

from supermarket_sim.customer import Customer, CustomerType, draw_customer_profile
from supermarket_sim.errors import InvariantViolation
from supermarket_sim.events import ServicePointType


def test_new_customer_is_at_the_entrance():
    c = Customer(1, CustomerType.REGULAR, 12, arrival_time=3.0)
    assert c.current_location is ServicePointType.ENTRANCE
    assert c.previous_location is None
    assert not c.is_express


def test_items_must_be_positive():
    with pytest.raises(ValueError):
        Customer(1, CustomerType.REGULAR, 0, arrival_time=0.0)


def test_durations_are_zero_until_stamped():
    c = Customer(1, CustomerType.EXPRESS, 3, arrival_time=0.0)
    assert c.shopping_duration == 0.0
    assert c.checkout_duration == 0.0
    assert c.total_time == 0.0

    c.start_shopping(1.0)
    assert c.shopping_duration == 0.0
    c.end_shopping(7.0)
    assert c.shopping_duration == 6.0

    c.start_checkout(7.0)
    c.mark_removed(10.5)
    assert c.checkout_duration == 3.5
    assert c.total_time == 10.5


def test_timestamps_are_written_once():
    c = Customer(1, CustomerType.REGULAR, 11, arrival_time=0.0)
    c.start_shopping(1.0)
    with pytest.raises(InvariantViolation):
        c.start_shopping(2.0)


def test_move_to_tracks_previous_location():
    c = Customer(1, CustomerType.REGULAR, 11, arrival_time=0.0)
    c.move_to(ServicePointType.SHOPPING)
    c.move_to(ServicePointType.SELF_CHECKOUT)
    assert c.current_location is ServicePointType.SELF_CHECKOUT
    assert c.previous_location is ServicePointType.SHOPPING


def test_snapshot_is_a_frozen_copy():
    c = Customer(4, CustomerType.EXPRESS, 2, arrival_time=5.0)
    snap = c.snapshot()
    c.move_to(ServicePointType.SHOPPING)
    assert snap.location is ServicePointType.ENTRANCE
    assert snap.to_message() == {
        "customer_id": 4,
        "customer_type": "express",
        "items": 2,
        "arrival_time": 5.0,
        "location": "entrance",
    }


def test_profile_items_stay_in_range_for_type():
    rng = random.Random(42)
    seen = set()
    for _ in range(2000):
        kind, items = draw_customer_profile(
            express_percentage=30.0,
            regular_items=(10, 30),
            express_items=(1, 10),
            rng=rng,
        )
        seen.add(kind)
        if kind is CustomerType.EXPRESS:
            assert 1 <= items <= 10
        else:
            assert 10 <= items <= 30
    assert seen == {CustomerType.EXPRESS, CustomerType.REGULAR}


@pytest.mark.parametrize("pct,expected", [(0.0, CustomerType.REGULAR), (100.0, CustomerType.EXPRESS)])
def test_profile_percentage_extremes(pct, expected):
    rng = random.Random(7)
    kinds = {
        draw_customer_profile(express_percentage=pct, regular_items=(5, 5), express_items=(1, 1), rng=rng)[0]
        for _ in range(200)
    }
    assert kinds == {expected}
