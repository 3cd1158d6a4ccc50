"""Celery task tests, run eagerly."""

from datetime import datetime, timedelta, timezone

from kitchen_queue.models import KitchenStatus
from kitchen_queue.services.clock import get_clock
from kitchen_queue.services.order_store import InMemoryOrderStore, OrderSnapshot
from kitchen_queue.tasks import auto_advance_ready_orders, run_auto_advance


def test_auto_advance_task_is_skipped_without_a_shared_store():
    result = auto_advance_ready_orders.apply().get()
    assert result == {"status": "skipped", "env_mode": "development"}


async def test_run_auto_advance_delivers_due_orders():
    now = datetime.now(timezone.utc)
    store = InMemoryOrderStore(get_clock(), tz=timezone.utc)
    store.put(OrderSnapshot(
        id=1,
        order_number=1,
        created_at=now,
        updated_at=now - timedelta(minutes=5),
        kitchen_status=KitchenStatus.READY,
    ))
    store.put(OrderSnapshot(
        id=2,
        order_number=2,
        created_at=now,
        updated_at=now + timedelta(minutes=5),
        kitchen_status=KitchenStatus.READY,
    ))

    report = await run_auto_advance(store)

    assert report.advanced == [1]
    assert report.failed == []
