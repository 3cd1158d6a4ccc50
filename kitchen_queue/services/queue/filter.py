"""
Queue Filter

Selects the orders that belong on the live queue board: created today
(local midnight boundary derived from ``now``), not yet delivered, sorted
by order number. Returns a new list on every call.
"""

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from kitchen_queue.core.timeutils import coerce_timestamp, start_of_day
from kitchen_queue.models import KitchenStatus
from kitchen_queue.services.order_store.base import OrderSnapshot


def _sort_key(order: OrderSnapshot) -> tuple:
    # id breaks ties between duplicate numbers; str() keeps mixed id types comparable
    return (order.order_number, str(order.id))


def select_visible_orders(
    orders: Iterable[OrderSnapshot],
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> list[OrderSnapshot]:
    """
    Return today's undelivered orders in display order.

    Args:
        orders: Full order snapshot from the store
        now: Current time (aware)
        tz: Zone that defines "today"; None for the host zone
    """
    midnight = start_of_day(now, tz)
    visible = []
    for order in orders:
        if order.kitchen_status == KitchenStatus.DELIVERED:
            continue
        created = coerce_timestamp(order.created_at)
        if created is None or created < midnight:
            continue
        visible.append(order)
    return sorted(visible, key=_sort_key)
