"""
Celery Tasks for background call reconciliation
"""
from .celery_app import celery_app
from .call_tasks import refresh_pending_calls

__all__ = ["celery_app", "refresh_pending_calls"]
