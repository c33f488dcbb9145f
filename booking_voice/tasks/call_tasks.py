"""
Background Call Reconciliation Tasks
Pulls Bolna status for calls that are still live
"""
import asyncio
from typing import Dict, Any, Optional
from celery import shared_task
from celery.utils.log import get_task_logger

from booking_voice.core.config import Settings, get_settings
from booking_voice.core.encryption import CredentialVault
from booking_voice.db.repository import DatabaseRepository
from booking_voice.services.bolna.client import BolnaClientFactory
from booking_voice.services.call_reconciler import CallReconciler
from booking_voice.services.credentials import CredentialService

logger = get_task_logger(__name__)


def run_async(coro):
    """Helper to run async code in Celery tasks"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


async def refresh_pending_calls_once(limit: int, settings: Optional[Settings] = None) -> Dict[str, int]:
    """One sweep over live calls with a repository opened for the run"""
    settings = settings or get_settings()
    repository = DatabaseRepository.create_repository(settings)
    if not await repository.initialize():
        raise RuntimeError("Database unavailable for call refresh")

    try:
        credentials = CredentialService(
            repository=repository,
            vault=CredentialVault.from_settings(settings),
            client_factory=BolnaClientFactory(settings),
            settings=settings
        )
        reconciler = CallReconciler(repository, credentials, settings)
        return await reconciler.refresh_pending_calls(limit=limit)
    finally:
        await repository.close()


@shared_task(
    bind=True,
    name="booking_voice.tasks.call_tasks.refresh_pending_calls",
    max_retries=3,
    default_retry_delay=30,
    queue="calls"
)
def refresh_pending_calls(self, limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Periodic task: refresh status of non-terminal calls from Bolna
    """
    limit = limit or get_settings().call_refresh_batch_size
    logger.info(f"Refreshing up to {limit} pending calls (task_id: {self.request.id})")

    try:
        result = run_async(refresh_pending_calls_once(limit))
    except RuntimeError as e:
        logger.error(f"Call refresh failed: {e}")
        raise self.retry(exc=e)

    return {"status": "success", "task_id": self.request.id, **result}
