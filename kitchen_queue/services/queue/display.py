"""
Queue Display

Everything the live queue board needs, apart from drawing it:

- DisplayClock: the "current time" shown on the board, refreshed on its
  own slow timer and never touching orders.
- QueueDisplay: owns the two periodic jobs (auto-advance scan and display
  clock refresh), starts and stops them together, and builds the rows
  for the board from the latest store snapshot.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from kitchen_queue.core.config import Settings, get_settings
from kitchen_queue.core.timeutils import coerce_timestamp
from kitchen_queue.models import KitchenStatus, OrderStatus
from kitchen_queue.services.clock.base import BaseClock
from kitchen_queue.services.localization import Localizer
from kitchen_queue.services.order_store.base import BaseOrderStore, OrderSnapshot
from kitchen_queue.services.queue.estimator import WaitEstimate, estimate_wait
from kitchen_queue.services.queue.filter import select_visible_orders
from kitchen_queue.services.queue.periodic import PeriodicTask
from kitchen_queue.services.queue.scheduler import AdvanceReport, AutoAdvanceScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusBadge:
    """Catalogue key and colour tone for an order's status badge."""
    label_key: str
    tone: str


def status_badge(order: OrderSnapshot) -> StatusBadge:
    if (
        order.status == OrderStatus.COMPLETED
        or order.kitchen_status in (KitchenStatus.DELIVERED, KitchenStatus.READY)
    ):
        return StatusBadge("ready", "success")
    if order.kitchen_status == KitchenStatus.IN_PROGRESS:
        return StatusBadge("in_progress", "warning")
    if order.kitchen_status == KitchenStatus.NEW:
        return StatusBadge("new", "info")
    return StatusBadge("pending", "info")


@dataclass(frozen=True)
class QueueRow:
    """One line of the queue board."""
    order_id: Any
    order_number: int
    kitchen_status: KitchenStatus
    badge: StatusBadge
    wait: WaitEstimate
    status_text: str
    wait_text: str
    created_at: datetime
    highlight: bool

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_number": self.order_number,
            "kitchen_status": self.kitchen_status.value,
            "status_key": self.badge.label_key,
            "status_tone": self.badge.tone,
            "status_text": self.status_text,
            "wait": self.wait.to_dict(),
            "wait_text": self.wait_text,
            "created_at": self.created_at.isoformat(),
            "highlight": self.highlight,
        }


class DisplayClock:
    """Holds the time rendered on the board."""

    def __init__(self, clock: BaseClock):
        self._clock = clock
        self.current_time = clock.now()

    def refresh(self) -> datetime:
        self.current_time = self._clock.now()
        return self.current_time


class QueueDisplay:
    """
    Live queue board controller.

    The auto-advance scan and the display clock run as two separate
    periodic tasks with their own intervals. ``run_scheduler=False`` leaves
    the scan to an external worker (Celery beat).
    """

    def __init__(
        self,
        store: BaseOrderStore,
        clock: BaseClock,
        settings: Optional[Settings] = None,
        localizer: Optional[Localizer] = None,
        run_scheduler: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.clock = clock
        self.localizer = localizer or Localizer(self.settings.default_language)
        self.scheduler = AutoAdvanceScheduler(
            store,
            clock,
            grace_period_seconds=self.settings.ready_grace_period_seconds,
            tz=self.settings.display_tz,
        )
        self.display_clock = DisplayClock(clock)

        if run_scheduler is None:
            run_scheduler = self.settings.in_process_scheduler
        self.auto_advance_task: Optional[PeriodicTask] = None
        if run_scheduler:
            self.auto_advance_task = PeriodicTask(
                "auto-advance",
                self.settings.auto_advance_interval_seconds,
                self.scheduler.run_once,
            )
        self.clock_task = PeriodicTask(
            "display-clock",
            self.settings.display_refresh_interval_seconds,
            self.display_clock.refresh,
        )

    @property
    def tasks(self) -> list[PeriodicTask]:
        return [t for t in (self.auto_advance_task, self.clock_task) if t is not None]

    def start(self) -> None:
        for task in self.tasks:
            task.start()

    async def stop(self) -> None:
        for task in self.tasks:
            await task.stop()

    async def advance_now(self) -> AdvanceReport:
        """Run one auto-advance pass outside the timer."""
        return await self.scheduler.run_once()

    async def visible_orders(self) -> list[OrderSnapshot]:
        now = self.display_clock.current_time
        orders = await self.store.list_orders()
        return select_visible_orders(orders, now, self.settings.display_tz)

    async def rows(self, lang: Optional[str] = None) -> list[QueueRow]:
        """Board rows, rendered at the display clock's current time."""
        now = self.display_clock.current_time
        rows = []
        for order in await self.visible_orders():
            wait = estimate_wait(
                order,
                now,
                default_new_minutes=self.settings.default_wait_new_minutes,
                default_in_progress_minutes=self.settings.default_wait_in_progress_minutes,
            )
            badge = status_badge(order)
            rows.append(QueueRow(
                order_id=order.id,
                order_number=order.order_number,
                kitchen_status=order.kitchen_status,
                badge=badge,
                wait=wait,
                status_text=self.localizer.text(badge.label_key, lang),
                wait_text=self.localizer.describe_wait(wait, lang),
                created_at=coerce_timestamp(order.created_at),
                highlight=(
                    order.kitchen_status == KitchenStatus.READY
                    or order.status == OrderStatus.COMPLETED
                ),
            ))
        return rows
