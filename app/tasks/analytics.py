import logging
from datetime import date
from celery import shared_task

from app.tasks import app_context

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2, default_retry_delay=300)
def rollup_vendor_analytics_task(self, day: str = None, vendor_id: int = None) -> int:
    """Write the daily analytics rollup for one vendor or all of them."""
    from app.services import analytics

    target = date.fromisoformat(day) if day else None
    with app_context():
        if vendor_id is not None:
            analytics.record_daily_rollup(vendor_id, target)
            return 1
        count = analytics.rollup_all(target)
        logger.info("Analytics rollup written for %s vendors", count)
        return count
