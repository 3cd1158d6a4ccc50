import os
from datetime import datetime, timedelta, timezone

import pytest

# Pin development mode before the package reads its settings
os.environ["ENV_MODE"] = "development"
os.environ.setdefault("IN_PROCESS_SCHEDULER", "false")

from kitchen_queue.core.config import Settings
from kitchen_queue.models import KitchenStatus, OrderStatus
from kitchen_queue.services.clock import FixedClock
from kitchen_queue.services.order_store import InMemoryOrderStore, OrderSnapshot

# Friday noon, UTC
NOON = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)
MIDNIGHT = NOON.replace(hour=0)


@pytest.fixture
def clock():
    return FixedClock(NOON)


@pytest.fixture
def store(clock):
    return InMemoryOrderStore(clock, tz=timezone.utc)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        env_mode="development",
        display_timezone="UTC",
        in_process_scheduler=False,
    )


@pytest.fixture
def make_order():
    """Build a snapshot; timestamps default to one hour before NOON."""
    counter = {"id": 0}

    def _make(
        order_number=None,
        kitchen_status=KitchenStatus.NEW,
        status=OrderStatus.PENDING,
        created_at=None,
        updated_at=None,
        estimated_completion_time=None,
        id=None,
    ):
        counter["id"] += 1
        created = created_at if created_at is not None else NOON - timedelta(hours=1)
        return OrderSnapshot(
            id=id if id is not None else counter["id"],
            order_number=order_number if order_number is not None else counter["id"],
            created_at=created,
            updated_at=updated_at if updated_at is not None else created,
            status=status,
            kitchen_status=kitchen_status,
            estimated_completion_time=estimated_completion_time,
        )

    return _make
