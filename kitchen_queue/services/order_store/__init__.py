"""
Order Store Factory

Provides a single entry point for obtaining the order store.
Automatically selects the in-memory or SQL store based on ENV_MODE.

Usage:
    from kitchen_queue.services.order_store import get_order_store

    store = get_order_store()
    orders = await store.list_orders()
"""

import logging
from functools import lru_cache

from kitchen_queue.core.config import get_settings
from kitchen_queue.services.clock import get_clock
from kitchen_queue.services.order_store.base import (
    BaseOrderStore,
    KitchenStatusUpdateResult,
    OrderSnapshot,
    OrderStoreError,
)
from kitchen_queue.services.order_store.memory import InMemoryOrderStore
from kitchen_queue.services.order_store.sql import SqlOrderStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_store() -> BaseOrderStore:
    """
    Get the configured order store instance.

    Returns InMemoryOrderStore in development and SqlOrderStore in
    staging/production.
    """
    settings = get_settings()

    if settings.use_sql_store:
        from kitchen_queue.database import async_session_maker

        logger.info(f"Order Store: Using SqlOrderStore ({settings.env_mode.value} mode)")
        return SqlOrderStore(async_session_maker, clock=get_clock(), tz=settings.display_tz)

    logger.info("Order Store: Using InMemoryOrderStore (development mode)")
    return InMemoryOrderStore(clock=get_clock(), tz=settings.display_tz)


def reset_order_store() -> None:
    """
    Clear the cached order store instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_order_store.cache_clear()
    logger.debug("Order store cache cleared")


__all__ = [
    "get_order_store",
    "reset_order_store",
    "BaseOrderStore",
    "KitchenStatusUpdateResult",
    "OrderSnapshot",
    "OrderStoreError",
    "InMemoryOrderStore",
    "SqlOrderStore",
]
