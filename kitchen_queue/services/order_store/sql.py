"""
SQL Order Store

Order store backed by the POS database through SQLAlchemy's async ORM.

Kitchen status writes are a single conditional UPDATE restricted to rows
whose current status is earlier than the target, so concurrent writers
(kitchen tablets, the auto-advance scan, a Celery beat worker) can only
move an order forward and repeating a write changes nothing.
"""

import logging
from datetime import datetime, tzinfo
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kitchen_queue.core.timeutils import coerce_timestamp, start_of_day
from kitchen_queue.models import KitchenStatus, Order, OrderStatus
from kitchen_queue.services.clock.base import BaseClock
from kitchen_queue.services.order_store.base import (
    BaseOrderStore,
    KitchenStatusUpdateResult,
    OrderSnapshot,
    OrderStoreError,
)

logger = logging.getLogger(__name__)


class SqlOrderStore(BaseOrderStore):
    """Order store on an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        clock: BaseClock,
        tz: Optional[tzinfo] = None,
    ):
        self._session_maker = session_maker
        self._clock = clock
        self._tz = tz
        logger.info("SqlOrderStore initialized")

    @property
    def provider_name(self) -> str:
        return "sql"

    async def list_orders(
        self,
        created_since: Optional[datetime] = None,
    ) -> list[OrderSnapshot]:
        query = select(Order).order_by(Order.order_number, Order.id)
        if created_since is not None:
            query = query.where(Order.created_at >= coerce_timestamp(created_since))
        try:
            async with self._session_maker() as session:
                result = await session.execute(query)
                return [OrderSnapshot.from_record(o) for o in result.scalars().all()]
        except SQLAlchemyError as e:
            raise OrderStoreError(f"Could not list orders: {e}") from e

    async def get_order(self, order_id: Any) -> Optional[OrderSnapshot]:
        try:
            async with self._session_maker() as session:
                record = await session.get(Order, order_id)
                return OrderSnapshot.from_record(record) if record else None
        except SQLAlchemyError as e:
            raise OrderStoreError(f"Could not load order {order_id}: {e}") from e

    async def update_kitchen_status(
        self,
        order_id: Any,
        new_status: KitchenStatus,
    ) -> KitchenStatusUpdateResult:
        target = KitchenStatus(new_status)
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    record = await session.get(Order, order_id)
                    if record is None:
                        return KitchenStatusUpdateResult.missing(order_id)
                    previous = KitchenStatus(record.kitchen_status)

                    result = await session.execute(
                        update(Order)
                        .where(
                            Order.id == order_id,
                            Order.kitchen_status.in_(target.earlier()),
                        )
                        .values(kitchen_status=target, updated_at=self._clock.now())
                        .execution_options(synchronize_session=False)
                    )
                    changed = result.rowcount == 1

                await session.refresh(record)
                snapshot = OrderSnapshot.from_record(record)
        except SQLAlchemyError as e:
            raise OrderStoreError(f"Could not update order {order_id}: {e}") from e

        if changed:
            logger.info(
                f"Order #{snapshot.order_number}: kitchen status {previous.value} -> {target.value}"
            )
        else:
            logger.debug(
                f"Order {order_id}: {snapshot.kitchen_status.value} -> {target.value} ignored (not forward)"
            )
        return KitchenStatusUpdateResult(
            success=True,
            order=snapshot,
            changed=changed,
            previous_status=previous,
        )

    async def update_estimate(
        self,
        order_id: Any,
        estimated_completion_time: Optional[datetime],
    ) -> KitchenStatusUpdateResult:
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    record = await session.get(Order, order_id)
                    if record is None:
                        return KitchenStatusUpdateResult.missing(order_id)
                    unchanged = (
                        KitchenStatus(record.kitchen_status).is_terminal
                        or coerce_timestamp(record.estimated_completion_time)
                        == coerce_timestamp(estimated_completion_time)
                    )
                    if not unchanged:
                        record.estimated_completion_time = estimated_completion_time
                        record.updated_at = self._clock.now()
                await session.refresh(record)
                snapshot = OrderSnapshot.from_record(record)
        except SQLAlchemyError as e:
            raise OrderStoreError(f"Could not update estimate for order {order_id}: {e}") from e

        return KitchenStatusUpdateResult(
            success=True,
            order=snapshot,
            changed=not unchanged,
            previous_status=snapshot.kitchen_status,
        )

    async def create_order(
        self,
        order_number: Optional[int] = None,
        status: OrderStatus = OrderStatus.PENDING,
        kitchen_status: KitchenStatus = KitchenStatus.NEW,
        estimated_completion_time: Optional[datetime] = None,
    ) -> OrderSnapshot:
        now = self._clock.now()
        try:
            async with self._session_maker() as session:
                async with session.begin():
                    if order_number is None:
                        highest = await session.execute(
                            select(func.max(Order.order_number)).where(
                                Order.created_at >= coerce_timestamp(start_of_day(now, self._tz))
                            )
                        )
                        order_number = (highest.scalar() or 0) + 1
                    record = Order(
                        order_number=order_number,
                        status=OrderStatus(status),
                        kitchen_status=KitchenStatus(kitchen_status),
                        estimated_completion_time=estimated_completion_time,
                        created_at=now,
                        updated_at=now,
                    )
                    session.add(record)
                await session.refresh(record)
                snapshot = OrderSnapshot.from_record(record)
        except SQLAlchemyError as e:
            raise OrderStoreError(f"Could not create order: {e}") from e

        logger.info(f"Order #{snapshot.order_number} created (id={snapshot.id})")
        return snapshot

    async def health_check(self) -> bool:
        try:
            async with self._session_maker() as session:
                await session.execute(select(func.now()))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Order store health check failed: {e}")
            return False
