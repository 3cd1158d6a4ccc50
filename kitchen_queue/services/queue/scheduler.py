"""
Auto-Advance Scheduler

Drives the one transition the queue engine owns: ``ready -> delivered``
once an order has been ready for the grace period (30 seconds by default).

Each pass reads a fresh snapshot from the order store, narrows it to the
orders on the board, and issues an idempotent ``delivered`` command for
every ready order whose anchor time is old enough. The anchor is the
kitchen's estimated completion time when one is set, otherwise the last
update time of the order. Passes can be repeated, overlap with kitchen
updates, or run from several processes; the store's forward-only update
absorbs all of that.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional

from kitchen_queue.core.timeutils import coerce_timestamp, start_of_day
from kitchen_queue.models import KitchenStatus
from kitchen_queue.services.clock.base import BaseClock
from kitchen_queue.services.order_store.base import (
    BaseOrderStore,
    OrderSnapshot,
    OrderStoreError,
)
from kitchen_queue.services.queue.filter import select_visible_orders

logger = logging.getLogger(__name__)

DEFAULT_GRACE_PERIOD_SECONDS = 30.0


@dataclass
class AdvanceReport:
    """
    Outcome of one scheduler pass.

    Attributes:
        checked_at: Clock time the pass ran at
        visible: Orders on the board during the pass
        advanced: Ids moved to delivered by this pass
        unchanged: Ids that were already delivered when the command landed
        not_found: Ids the store no longer knows
        failed: Ids whose update raised a store error
        skipped: Ready ids with no usable anchor timestamp
    """
    checked_at: datetime
    visible: int = 0
    advanced: list[Any] = field(default_factory=list)
    unchanged: list[Any] = field(default_factory=list)
    not_found: list[Any] = field(default_factory=list)
    failed: list[Any] = field(default_factory=list)
    skipped: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "checked_at": self.checked_at.isoformat(),
            "visible": self.visible,
            "advanced": list(self.advanced),
            "unchanged": list(self.unchanged),
            "not_found": list(self.not_found),
            "failed": list(self.failed),
            "skipped": list(self.skipped),
        }


def ready_since(order: OrderSnapshot) -> Optional[datetime]:
    """
    Anchor for the grace period: the estimate if set, else ``updated_at``.

    Returns None when the anchor is malformed.
    """
    if order.estimated_completion_time is not None:
        return coerce_timestamp(order.estimated_completion_time)
    return coerce_timestamp(order.updated_at)


class AutoAdvanceScheduler:
    """Moves ready orders to delivered after the grace period."""

    def __init__(
        self,
        store: BaseOrderStore,
        clock: BaseClock,
        grace_period_seconds: float = DEFAULT_GRACE_PERIOD_SECONDS,
        tz: Optional[tzinfo] = None,
    ):
        self.store = store
        self.clock = clock
        self.grace_period = timedelta(seconds=grace_period_seconds)
        self.tz = tz

    def is_due(self, order: OrderSnapshot, now: datetime) -> bool:
        """True if ``order`` is ready and its grace period has run out."""
        if order.kitchen_status != KitchenStatus.READY:
            return False
        anchor = ready_since(order)
        return anchor is not None and now - anchor >= self.grace_period

    async def run_once(self) -> AdvanceReport:
        """Run one scan over the board and deliver every due order."""
        now = coerce_timestamp(self.clock.now())
        orders = await self.store.list_orders(created_since=start_of_day(now, self.tz))
        visible = select_visible_orders(orders, now, self.tz)
        report = AdvanceReport(checked_at=now, visible=len(visible))

        for order in visible:
            if order.kitchen_status != KitchenStatus.READY:
                continue
            if ready_since(order) is None:
                logger.warning(f"Order #{order.order_number} is ready but has no usable timestamp; skipped")
                report.skipped.append(order.id)
                continue
            if not self.is_due(order, now):
                continue

            try:
                result = await self.store.update_kitchen_status(order.id, KitchenStatus.DELIVERED)
            except OrderStoreError as e:
                logger.error(f"Auto-advance failed for order #{order.order_number}: {e}")
                report.failed.append(order.id)
                continue
            except Exception:
                logger.exception(f"Unexpected error advancing order #{order.order_number}")
                report.failed.append(order.id)
                continue

            if result.not_found:
                logger.warning(f"Auto-advance: order {order.id} no longer exists")
                report.not_found.append(order.id)
            elif result.changed:
                logger.info(f"Order #{order.order_number} auto-advanced to delivered")
                report.advanced.append(order.id)
            else:
                report.unchanged.append(order.id)

        if report.advanced:
            logger.debug(f"Auto-advance pass: {len(report.advanced)} delivered of {report.visible} visible")
        return report
