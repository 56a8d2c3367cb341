import logging
from sqlalchemy import update

from models import db
from models.notification import Notification, NOTIFICATION_TYPES
from app.errors import NotFoundError, ValidationError
from app.utils.db import transactional

logger = logging.getLogger(__name__)


def create_notification(user_id, type, title, message, data=None) -> Notification:
    """Add a notification to the current session; the caller commits."""
    if type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Unknown notification type: {type}")
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        data=data,
        is_read=False,
    )
    db.session.add(notification)
    db.session.flush()
    return notification


def list_notifications(user_id, page=1, limit=20, type=None, is_read=None) -> dict:
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or 20), 1), 100)
    query = Notification.query.filter_by(user_id=user_id)
    if type:
        query = query.filter_by(type=type)
    if is_read is not None:
        query = query.filter_by(is_read=is_read)

    total = query.count()
    rows = (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    unread = Notification.query.filter_by(user_id=user_id, is_read=False).count()
    return {
        "notifications": [n.to_dict() for n in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
        "unreadCount": unread,
    }


def mark_read(user_id, notification_id) -> Notification:
    notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
    if notification is None:
        raise NotFoundError("Notification not found")
    with transactional("Failed to mark notification read"):
        notification.is_read = True
    return notification


def mark_all_read(user_id) -> int:
    with transactional("Failed to mark notifications read"):
        result = db.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
    return result.rowcount
