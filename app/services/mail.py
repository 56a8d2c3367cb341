"""Outbound email: SendGrid delivery plus the best-effort enqueue used after commits."""
import logging
from flask import current_app, has_app_context, render_template

from app.config import get_config_class
from app.errors import NotificationDeliveryError
from app.metrics import EMAIL_FAILURES

logger = logging.getLogger(__name__)


def _setting(name, default=None):
    if has_app_context():
        return current_app.config.get(name, default)
    return getattr(get_config_class(), name, default)


def admin_address() -> str:
    return _setting("ADMIN_EMAIL", "info@grabtogo.in")


def send_email(to: str, subject: str, html: str, text: str = None) -> bool:
    """Deliver one email through SendGrid.

    Returns False without contacting the provider when no API key is
    configured. Provider failures raise NotificationDeliveryError so the
    calling task can decide whether to retry.
    """
    api_key = _setting("SENDGRID_API_KEY")
    if not api_key:
        logger.info("Email not sent (SENDGRID_API_KEY unset): subject=%s", subject)
        return False

    from sendgrid import SendGridAPIClient
    from sendgrid.helpers.mail import Mail

    message = Mail(
        from_email=(_setting("EMAIL_FROM"), _setting("EMAIL_FROM_NAME")),
        to_emails=to,
        subject=subject,
        html_content=html,
        plain_text_content=text,
    )
    try:
        response = SendGridAPIClient(api_key).send(message)
    except Exception as exc:
        raise NotificationDeliveryError(f"SendGrid send failed: {exc}") from exc
    if response.status_code >= 300:
        raise NotificationDeliveryError(f"SendGrid returned {response.status_code}")
    logger.info("Email sent: subject=%s status=%s", subject, response.status_code)
    return True


def queue_email(to: str, subject: str, template: str, **context) -> bool:
    """Render an email template and hand it to the worker queue.

    Never raises: a committed state change must not be undone or reported
    as failed because its notification could not be queued.
    """
    from app.tasks.notifications import send_email_task

    try:
        html = render_template(f"email/{template}.html", **context)
        send_email_task.delay(to, subject, html)
    except Exception:
        EMAIL_FAILURES.labels("enqueue").inc()
        logger.exception("Failed to queue email: template=%s", template)
        return False
    return True
