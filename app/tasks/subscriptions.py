import logging
from celery import shared_task

from app.tasks import app_context
from app.utils.db import transactional

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2, default_retry_delay=300)
def sweep_subscriptions_task(self) -> dict:
    """Expire trials, start grace periods and end them once end_date passes."""
    from app.services import subscriptions

    with app_context():
        with transactional("Subscription sweep failed"):
            counts = subscriptions.sweep()
        logger.info("Subscription sweep: %s", counts)
        return counts
