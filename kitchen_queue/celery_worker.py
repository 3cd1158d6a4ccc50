"""
Celery Worker Configuration
Sets up Celery with Redis as message broker and result backend.

The beat schedule runs the auto-advance pass for deployments where several
API processes share one database and IN_PROCESS_SCHEDULER=false.
"""

from celery import Celery

from kitchen_queue.core.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    'kitchen_queue_worker',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['kitchen_queue.tasks']  # Module containing our tasks
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_concurrency=2,

    # Result settings
    result_expires=600,

    # A scan that could not start in time is dropped; the next one covers it
    task_acks_late=False,

    broker_connection_retry_on_startup=True,

    beat_schedule={
        'auto-advance-ready-orders': {
            'task': 'kitchen_queue.tasks.auto_advance_ready_orders',
            'schedule': settings.auto_advance_interval_seconds,
            'options': {'expires': settings.auto_advance_interval_seconds},
        },
    },
)


if __name__ == '__main__':
    celery_app.start()
