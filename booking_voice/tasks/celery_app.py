"""
Celery Configuration for background call reconciliation
"""
from celery import Celery

from booking_voice.core.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    "booking_voice",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["booking_voice.tasks.call_tasks"]
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task routing
    task_routes={
        "booking_voice.tasks.call_tasks.refresh_pending_calls": {"queue": "calls"},
    },

    # Task execution settings
    task_acks_late=True,  # Acknowledge after task completes
    task_reject_on_worker_lost=True,  # Requeue if worker dies
    task_time_limit=300,  # 5 minute hard limit
    task_soft_time_limit=240,  # 4 minute soft limit

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    broker_connection_retry_on_startup=True,

    # Periodic status pull for calls whose webhooks never arrived
    beat_schedule={
        "refresh-pending-calls": {
            "task": "booking_voice.tasks.call_tasks.refresh_pending_calls",
            "schedule": float(settings.call_refresh_interval_seconds),
            "kwargs": {"limit": settings.call_refresh_batch_size},
        },
    },
)

# Define task queues
celery_app.conf.task_queues = {
    "calls": {
        "exchange": "calls",
        "routing_key": "calls",
    },
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
}
