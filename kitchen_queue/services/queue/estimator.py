"""
Wait Time Estimator

Maps an order snapshot and the current time to the wait indicator shown
on the queue board. The result is a structured value; turning it into
display text is the localizer's job.

Rules, first match wins:
    1. completed, delivered or ready        -> READY
    2. estimate present and already elapsed -> SOON
    3. estimate present and in the future   -> MINUTES(ceil(remaining / 60s)), at least 1
    4. in-progress without an estimate      -> DEFAULT_IN_PROGRESS (15)
    5. new without an estimate              -> DEFAULT_NEW (20)
    6. anything else                        -> UNSPECIFIED
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from kitchen_queue.core.timeutils import coerce_timestamp
from kitchen_queue.models import KitchenStatus, OrderStatus
from kitchen_queue.services.order_store.base import OrderSnapshot

DEFAULT_NEW_MINUTES = 20
DEFAULT_IN_PROGRESS_MINUTES = 15


class WaitKind(str, Enum):
    READY = "ready"
    MINUTES = "minutes"
    SOON = "soon"
    DEFAULT_IN_PROGRESS = "default_in_progress"
    DEFAULT_NEW = "default_new"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class WaitEstimate:
    """
    Wait indicator for one order.

    ``minutes`` is set for MINUTES and the two defaults, None otherwise.
    """
    kind: WaitKind
    minutes: Optional[int] = None

    @property
    def is_ready(self) -> bool:
        return self.kind is WaitKind.READY

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "minutes": self.minutes}


READY = WaitEstimate(WaitKind.READY)
SOON = WaitEstimate(WaitKind.SOON)
UNSPECIFIED = WaitEstimate(WaitKind.UNSPECIFIED)


def is_terminal_for_display(order: OrderSnapshot) -> bool:
    """Completed or delivered orders only ever show the ready text."""
    return order.status == OrderStatus.COMPLETED or order.kitchen_status == KitchenStatus.DELIVERED


def minutes_remaining(estimate: datetime, now: datetime) -> int:
    """Whole minutes until ``estimate``, rounded up, never below 1."""
    remaining = (estimate - now).total_seconds()
    return max(1, math.ceil(remaining / 60))


def estimate_wait(
    order: OrderSnapshot,
    now: datetime,
    default_new_minutes: int = DEFAULT_NEW_MINUTES,
    default_in_progress_minutes: int = DEFAULT_IN_PROGRESS_MINUTES,
) -> WaitEstimate:
    """Compute the wait indicator for ``order`` at ``now``."""
    if is_terminal_for_display(order) or order.kitchen_status == KitchenStatus.READY:
        return READY

    if order.estimated_completion_time is not None:
        estimate = coerce_timestamp(order.estimated_completion_time)
        current = coerce_timestamp(now)
        if estimate is None or current is None:
            return UNSPECIFIED
        if estimate <= current:
            return SOON
        return WaitEstimate(WaitKind.MINUTES, minutes_remaining(estimate, current))

    if order.kitchen_status == KitchenStatus.IN_PROGRESS:
        return WaitEstimate(WaitKind.DEFAULT_IN_PROGRESS, default_in_progress_minutes)
    if order.kitchen_status == KitchenStatus.NEW:
        return WaitEstimate(WaitKind.DEFAULT_NEW, default_new_minutes)
    return UNSPECIFIED
