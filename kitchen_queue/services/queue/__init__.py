"""
Queue engine: wait estimates, board selection, auto-advance, timers.
"""

from kitchen_queue.services.queue.estimator import WaitEstimate, WaitKind, estimate_wait
from kitchen_queue.services.queue.filter import select_visible_orders
from kitchen_queue.services.queue.periodic import PeriodicTask
from kitchen_queue.services.queue.scheduler import AdvanceReport, AutoAdvanceScheduler, ready_since

__all__ = [
    "WaitEstimate",
    "WaitKind",
    "estimate_wait",
    "select_visible_orders",
    "PeriodicTask",
    "AdvanceReport",
    "AutoAdvanceScheduler",
    "ready_since",
]
