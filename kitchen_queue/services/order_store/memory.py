"""
In-Memory Order Store

Order store for development and tests. Orders live in a dict guarded by
an asyncio.Lock, so concurrent updates from the kitchen endpoint and the
auto-advance scheduler are applied one at a time and only ever move an
order forward.
"""

import asyncio
import itertools
import logging
from datetime import datetime, tzinfo
from typing import Any, Iterable, Optional

from kitchen_queue.core.timeutils import coerce_timestamp, start_of_day
from kitchen_queue.models import KitchenStatus, OrderStatus, is_forward_transition
from kitchen_queue.services.clock.base import BaseClock
from kitchen_queue.services.order_store.base import (
    BaseOrderStore,
    KitchenStatusUpdateResult,
    OrderSnapshot,
)

logger = logging.getLogger(__name__)


class InMemoryOrderStore(BaseOrderStore):
    """Process-local order store."""

    def __init__(
        self,
        clock: BaseClock,
        tz: Optional[tzinfo] = None,
        orders: Iterable[OrderSnapshot] = (),
    ):
        self._clock = clock
        self._tz = tz
        self._lock = asyncio.Lock()
        self._orders: dict[Any, OrderSnapshot] = {}
        for order in orders:
            self._orders[order.id] = order
        start = max((o.id for o in self._orders.values() if isinstance(o.id, int)), default=0)
        self._ids = itertools.count(start + 1)
        logger.info(f"InMemoryOrderStore initialized ({len(self._orders)} orders)")

    @property
    def provider_name(self) -> str:
        return "memory"

    async def list_orders(
        self,
        created_since: Optional[datetime] = None,
    ) -> list[OrderSnapshot]:
        orders = list(self._orders.values())
        if created_since is None:
            return orders
        since = coerce_timestamp(created_since)
        return [
            o for o in orders
            if (created := coerce_timestamp(o.created_at)) is not None and created >= since
        ]

    async def get_order(self, order_id: Any) -> Optional[OrderSnapshot]:
        return self._orders.get(order_id)

    async def update_kitchen_status(
        self,
        order_id: Any,
        new_status: KitchenStatus,
    ) -> KitchenStatusUpdateResult:
        target = KitchenStatus(new_status)
        async with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                return KitchenStatusUpdateResult.missing(order_id)

            previous = current.kitchen_status
            if not is_forward_transition(previous, target):
                logger.debug(
                    f"Order {order_id}: {previous.value} -> {target.value} ignored (not forward)"
                )
                return KitchenStatusUpdateResult(
                    success=True,
                    order=current,
                    previous_status=previous,
                )

            updated = current.evolve(kitchen_status=target, updated_at=self._clock.now())
            self._orders[order_id] = updated

        logger.info(f"Order #{updated.order_number}: kitchen status {previous.value} -> {target.value}")
        return KitchenStatusUpdateResult(
            success=True,
            order=updated,
            changed=True,
            previous_status=previous,
        )

    async def update_estimate(
        self,
        order_id: Any,
        estimated_completion_time: Optional[datetime],
    ) -> KitchenStatusUpdateResult:
        async with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                return KitchenStatusUpdateResult.missing(order_id)
            if (
                current.kitchen_status.is_terminal
                or current.estimated_completion_time == estimated_completion_time
            ):
                return KitchenStatusUpdateResult(
                    success=True,
                    order=current,
                    previous_status=current.kitchen_status,
                )
            updated = current.evolve(
                estimated_completion_time=estimated_completion_time,
                updated_at=self._clock.now(),
            )
            self._orders[order_id] = updated

        return KitchenStatusUpdateResult(
            success=True,
            order=updated,
            changed=True,
            previous_status=updated.kitchen_status,
        )

    async def create_order(
        self,
        order_number: Optional[int] = None,
        status: OrderStatus = OrderStatus.PENDING,
        kitchen_status: KitchenStatus = KitchenStatus.NEW,
        estimated_completion_time: Optional[datetime] = None,
    ) -> OrderSnapshot:
        async with self._lock:
            now = self._clock.now()
            if order_number is None:
                order_number = self._next_order_number(now)
            order = OrderSnapshot(
                id=next(self._ids),
                order_number=order_number,
                created_at=now,
                updated_at=now,
                status=OrderStatus(status),
                kitchen_status=KitchenStatus(kitchen_status),
                estimated_completion_time=estimated_completion_time,
            )
            self._orders[order.id] = order

        logger.info(f"Order #{order.order_number} created (id={order.id})")
        return order

    def _next_order_number(self, now: datetime) -> int:
        midnight = start_of_day(now, self._tz)
        todays = [
            o.order_number for o in self._orders.values()
            if (created := coerce_timestamp(o.created_at)) is not None and created >= midnight
        ]
        return max(todays, default=0) + 1

    def put(self, order: OrderSnapshot) -> None:
        """Insert or overwrite a snapshot as-is (test and seeding helper)."""
        self._orders[order.id] = order

    async def health_check(self) -> bool:
        return True
