"""
Celery Tasks
Background tasks for the kitchen queue.
"""

import asyncio
import logging

from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import create_async_engine

from kitchen_queue.celery_worker import celery_app
from kitchen_queue.core.config import get_settings
from kitchen_queue.database import build_session_maker
from kitchen_queue.services.clock import get_clock
from kitchen_queue.services.order_store import BaseOrderStore, SqlOrderStore
from kitchen_queue.services.queue.scheduler import AdvanceReport, AutoAdvanceScheduler

logger = logging.getLogger(__name__)


async def run_auto_advance(store: BaseOrderStore) -> AdvanceReport:
    """One scheduler pass against ``store`` with the configured grace period."""
    settings = get_settings()
    scheduler = AutoAdvanceScheduler(
        store,
        get_clock(),
        grace_period_seconds=settings.ready_grace_period_seconds,
        tz=settings.display_tz,
    )
    return await scheduler.run_once()


async def _run_with_fresh_engine() -> AdvanceReport:
    # Each asyncio.run() gets its own loop, so pooled connections can't be reused
    settings = get_settings()
    engine = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        store = SqlOrderStore(build_session_maker(engine), clock=get_clock(), tz=settings.display_tz)
        return await run_auto_advance(store)
    finally:
        await engine.dispose()


@celery_app.task(bind=True, ignore_result=False)
def auto_advance_ready_orders(self) -> dict:
    """
    Move ready orders past the grace period to delivered.

    Safe to run concurrently with the API and with itself: every update
    is a forward-only idempotent command.

    The worker has no access to the API's in-memory store, so in
    development mode the task does nothing.

    Returns:
        dict: The pass report, or a skip notice in development mode
    """
    settings = get_settings()
    if not settings.use_sql_store:
        logger.warning(
            f"Task {self.request.id}: auto-advance skipped, "
            f"{settings.env_mode.value} mode has no shared order store"
        )
        return {"status": "skipped", "env_mode": settings.env_mode.value}

    report = asyncio.run(_run_with_fresh_engine())

    if report.advanced or report.failed:
        logger.info(
            f"Task {self.request.id}: delivered {len(report.advanced)}, "
            f"failed {len(report.failed)}, not found {len(report.not_found)}"
        )
    return report.to_dict()

