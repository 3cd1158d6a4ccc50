"""Tests for the queue board controller: badges, rows and timers."""

import asyncio
from datetime import timedelta

import pytest

from kitchen_queue.models import KitchenStatus, OrderStatus
from kitchen_queue.services.queue.display import QueueDisplay, status_badge
from kitchen_queue.services.queue.estimator import WaitKind

from conftest import MIDNIGHT, NOON


@pytest.fixture
def display(store, clock, settings):
    return QueueDisplay(store, clock, settings=settings)


@pytest.mark.parametrize(
    "kitchen_status, status, key, tone",
    [
        (KitchenStatus.READY, OrderStatus.PENDING, "ready", "success"),
        (KitchenStatus.DELIVERED, OrderStatus.PENDING, "ready", "success"),
        (KitchenStatus.NEW, OrderStatus.COMPLETED, "ready", "success"),
        (KitchenStatus.IN_PROGRESS, OrderStatus.PENDING, "in_progress", "warning"),
        (KitchenStatus.NEW, OrderStatus.PENDING, "new", "info"),
    ],
)
def test_status_badge(make_order, kitchen_status, status, key, tone):
    badge = status_badge(make_order(kitchen_status=kitchen_status, status=status))
    assert (badge.label_key, badge.tone) == (key, tone)


async def test_rows_follow_the_board_rules(display, store, make_order):
    store.put(make_order(order_number=3, kitchen_status=KitchenStatus.READY))
    store.put(make_order(order_number=1, kitchen_status=KitchenStatus.NEW))
    store.put(make_order(
        order_number=2,
        kitchen_status=KitchenStatus.IN_PROGRESS,
        estimated_completion_time=NOON + timedelta(seconds=125),
    ))
    store.put(make_order(order_number=4, kitchen_status=KitchenStatus.DELIVERED))
    store.put(make_order(order_number=5, created_at=MIDNIGHT - timedelta(minutes=1)))

    rows = await display.rows()

    assert [r.order_number for r in rows] == [1, 2, 3]
    assert [r.wait.kind for r in rows] == [WaitKind.DEFAULT_NEW, WaitKind.MINUTES, WaitKind.READY]
    assert [r.wait_text for r in rows] == ["20 min", "3 min", "Ready for pickup"]
    assert [r.status_text for r in rows] == ["New", "In progress", "Ready"]
    assert [r.highlight for r in rows] == [False, False, True]


async def test_rows_in_arabic(display, store, make_order):
    store.put(make_order(kitchen_status=KitchenStatus.READY))
    [row] = await display.rows("ar")
    assert row.status_text == "جاهز"
    assert row.to_dict()["status_key"] == "ready"


async def test_rows_use_the_display_clock_time(display, store, clock, make_order):
    store.put(make_order(
        kitchen_status=KitchenStatus.IN_PROGRESS,
        estimated_completion_time=NOON + timedelta(minutes=10),
    ))

    clock.advance(minutes=4)
    [before] = await display.rows()
    display.display_clock.refresh()
    [after] = await display.rows()

    assert before.wait.minutes == 10
    assert after.wait.minutes == 6


async def test_advance_now_delivers_due_orders(display, store, make_order):
    order = make_order(kitchen_status=KitchenStatus.READY, updated_at=NOON - timedelta(minutes=1))
    store.put(order)
    report = await display.advance_now()
    assert report.advanced == [order.id]
    assert await display.rows() == []


def test_scheduler_task_follows_settings(store, clock, settings):
    external = QueueDisplay(store, clock, settings=settings)
    assert external.auto_advance_task is None
    assert external.tasks == [external.clock_task]

    in_process = QueueDisplay(store, clock, settings=settings, run_scheduler=True)
    assert in_process.auto_advance_task.interval == settings.auto_advance_interval_seconds
    assert in_process.clock_task.interval == settings.display_refresh_interval_seconds


async def test_start_and_stop_both_timers(store, clock, settings):
    display = QueueDisplay(store, clock, settings=settings, run_scheduler=True)
    display.start()
    assert all(task.is_running for task in display.tasks)
    await display.stop()
    assert not any(task.is_running for task in display.tasks)


async def test_clock_task_only_refreshes_time(store, clock, settings, make_order):
    fast = settings.model_copy(update={"display_refresh_interval_seconds": 0.01})
    order = make_order(kitchen_status=KitchenStatus.READY, updated_at=NOON - timedelta(hours=1))
    store.put(order)
    display = QueueDisplay(store, clock, settings=fast)

    clock.advance(minutes=1)
    display.start()
    await asyncio.sleep(0.05)
    await display.stop()

    assert display.display_clock.current_time == NOON + timedelta(minutes=1)
    assert (await store.get_order(order.id)).kitchen_status is KitchenStatus.READY


async def test_rows_normalise_naive_created_at_to_utc(display, store, make_order):
    naive = (NOON - timedelta(hours=1)).replace(tzinfo=None)
    store.put(make_order(created_at=naive))
    [row] = await display.rows()
    assert row.created_at == NOON - timedelta(hours=1)
    assert row.to_dict()["created_at"] == "2024-05-10T11:00:00+00:00"
