"""
Periodic Tasks

Runs a callback on a fixed interval in its own asyncio task. Each
recurring job of the queue display gets its own PeriodicTask so the jobs
keep their own cadence and a failure in one never affects the other.

A tick that raises is logged and the schedule carries on. Ticks that were
missed while the event loop was busy are dropped, not replayed.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Union[Awaitable[Any], Any]]


class PeriodicTask:
    """Fixed-interval job with per-tick failure isolation."""

    def __init__(self, name: str, interval: float, callback: TickCallback):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.interval = float(interval)
        self._callback = callback
        self._task: Optional[asyncio.Task] = None
        self.ticks = 0
        self.failures = 0
        self.skipped = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the loop on the running event loop; first tick after one interval."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=f"periodic:{self.name}")
        logger.info(f"Periodic task '{self.name}' started (every {self.interval:g}s)")

    async def stop(self) -> None:
        """Cancel the loop. An in-flight tick is cancelled, not awaited to completion."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"Periodic task '{self.name}' stopped after {self.ticks} ticks")

    async def run_once(self) -> bool:
        """Run a single tick now. Returns False if the callback raised."""
        self.ticks += 1
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
            return True
        except asyncio.CancelledError:
            raise
        except Exception:
            self.failures += 1
            logger.exception(f"Periodic task '{self.name}' tick failed")
            return False

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_run = loop.time() + self.interval
        while True:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            await self.run_once()

            next_run += self.interval
            now = loop.time()
            if next_run <= now:
                missed = int((now - next_run) // self.interval) + 1
                self.skipped += missed
                next_run += missed * self.interval
                logger.debug(f"Periodic task '{self.name}' skipped {missed} tick(s)")
