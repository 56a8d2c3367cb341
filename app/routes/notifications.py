from flask import Blueprint, request
from app.errors import ValidationError
from app.services import notifications
from app.utils import auth_required, ok
from app.version import API_PREFIX

notifications_bp = Blueprint("notifications", __name__, url_prefix=f"{API_PREFIX}/notifications")


@notifications_bp.before_request
@auth_required
def _require_login():
    return None


def _bool_arg(name):
    raw = request.args.get(name)
    if raw is None:
        return None
    if raw.lower() in ("true", "1"):
        return True
    if raw.lower() in ("false", "0"):
        return False
    raise ValidationError(f"{name} must be true or false", fields=[name])


@notifications_bp.route("", methods=["GET"])
def list_notifications():
    result = notifications.list_notifications(
        request.user.id,
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 20, type=int),
        type=request.args.get("type"),
        is_read=_bool_arg("isRead"),
    )
    return ok(message="Notifications fetched", **result)


@notifications_bp.route("/<int:notification_id>/read", methods=["PATCH"])
def mark_read(notification_id):
    notification = notifications.mark_read(request.user.id, notification_id)
    return ok(message="Notification marked as read", notification=notification.to_dict())


@notifications_bp.route("/read-all", methods=["POST"])
def mark_all_read():
    updated = notifications.mark_all_read(request.user.id)
    return ok(message="All notifications marked as read", updated=updated)
