"""Tests for selecting and ordering the orders shown on the queue board."""

from datetime import timedelta, timezone

from kitchen_queue.core.timeutils import start_of_day
from kitchen_queue.models import KitchenStatus
from kitchen_queue.services.queue.filter import select_visible_orders

from conftest import MIDNIGHT, NOON

UTC = timezone.utc


def test_delivered_orders_are_hidden(make_order):
    orders = [
        make_order(kitchen_status=KitchenStatus.NEW),
        make_order(kitchen_status=KitchenStatus.DELIVERED),
        make_order(kitchen_status=KitchenStatus.READY),
    ]
    visible = select_visible_orders(orders, NOON, UTC)
    assert [o.kitchen_status for o in visible] == [KitchenStatus.NEW, KitchenStatus.READY]


def test_orders_from_before_midnight_are_hidden(make_order):
    yesterday = make_order(order_number=1, created_at=MIDNIGHT - timedelta(seconds=1))
    at_midnight = make_order(order_number=2, created_at=MIDNIGHT)
    this_morning = make_order(order_number=3, created_at=NOON - timedelta(hours=3))

    visible = select_visible_orders([yesterday, at_midnight, this_morning], NOON, UTC)

    assert [o.order_number for o in visible] == [2, 3]


def test_sorted_ascending_by_order_number(make_order):
    orders = [make_order(order_number=n) for n in (7, 2, 11, 1, 5)]
    visible = select_visible_orders(orders, NOON, UTC)
    numbers = [o.order_number for o in visible]
    assert numbers == [1, 2, 5, 7, 11]
    assert all(a < b for a, b in zip(numbers, numbers[1:]))


def test_repeated_calls_return_fresh_equal_lists(make_order):
    orders = [make_order(order_number=n) for n in (3, 1, 2)]
    first = select_visible_orders(orders, NOON, UTC)
    second = select_visible_orders(orders, NOON, UTC)
    assert first == second
    assert first is not second
    first.clear()
    assert len(select_visible_orders(orders, NOON, UTC)) == 3


def test_input_is_not_reordered(make_order):
    orders = [make_order(order_number=n) for n in (3, 1, 2)]
    select_visible_orders(orders, NOON, UTC)
    assert [o.order_number for o in orders] == [3, 1, 2]


def test_malformed_created_at_is_hidden(make_order):
    broken = make_order(order_number=1, created_at="yesterday-ish")
    missing = make_order(order_number=2)
    missing = missing.evolve(created_at=None)
    fine = make_order(order_number=3)
    visible = select_visible_orders([broken, missing, fine], NOON, UTC)
    assert [o.order_number for o in visible] == [3]


def test_midnight_follows_display_timezone(make_order):
    plus_three = timezone(timedelta(hours=3))
    # 22:00 UTC is already 01:00 the next day at UTC+3
    now = NOON.replace(hour=22)
    late_evening = make_order(order_number=1, created_at=NOON.replace(hour=20, minute=30))

    assert select_visible_orders([late_evening], now, UTC) == [late_evening]
    assert select_visible_orders([late_evening], now, plus_three) == []
    assert start_of_day(now, plus_three) == NOON.replace(hour=21)


def test_duplicate_numbers_keep_a_stable_order(make_order):
    a = make_order(order_number=4, id=1)
    b = make_order(order_number=4, id=2)
    assert select_visible_orders([b, a], NOON, UTC) == [a, b]
    assert select_visible_orders([a, b], NOON, UTC) == [a, b]
