import logging
from celery import shared_task

from app.errors import NotificationDeliveryError
from app.metrics import EMAIL_FAILURES
from app.tasks import app_context

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_email_task(self, to: str, subject: str, html: str) -> bool:
    """Deliver an email; retried on a worker, logged and dropped when eager."""
    from app.services import mail

    with app_context():
        try:
            return mail.send_email(to, subject, html)
        except NotificationDeliveryError as exc:
            EMAIL_FAILURES.labels("delivery").inc()
            if self.request.is_eager:
                logger.error("Email delivery failed: %s", exc)
                return False
            raise self.retry(exc=exc)
