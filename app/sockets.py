"""Socket.IO event handlers for chat, order updates and presence."""
import logging
from functools import wraps

from flask import request, session
from flask_socketio import emit, join_room, leave_room, ConnectionRefusedError

from extensions import socketio
from models import db
from models.user import User, ROLE_VENDOR
from app.auth.permissions import role_has_scope
from app.errors import MarketplaceError
from app.services import relay
from app.utils.auth import bearer_token
from app.utils.jwt import decode_token, TokenError

logger = logging.getLogger(__name__)


def _current_user():
    user_id = session.get("user_id")
    return db.session.get(User, user_id) if user_id is not None else None


def _chat_id(data):
    if isinstance(data, dict):
        data = data.get("chatId")
    try:
        return int(data)
    except (TypeError, ValueError):
        return None


def authenticated(fn):
    """Resolve the socket's user and turn service errors into ``error`` events."""

    @wraps(fn)
    def wrapper(*args):
        user = _current_user()
        if user is None:
            emit("error", {"message": "Authentication error"})
            return None
        try:
            return fn(user, *args)
        except MarketplaceError as e:
            emit("error", {"message": e.message})
            return None

    return wrapper


@socketio.on("connect")
def on_connect(auth=None):
    token = (auth or {}).get("token") if isinstance(auth, dict) else None
    token = token or request.args.get("token")
    if not token:
        raise ConnectionRefusedError("Authentication error")
    try:
        payload = decode_token(bearer_token(token), expected_type="access")
    except TokenError:
        raise ConnectionRefusedError("Authentication error")
    user = db.session.get(User, payload["sub"])
    if user is None:
        raise ConnectionRefusedError("Authentication error")

    session["user_id"] = user.id
    join_room(relay.user_room(user.id))
    if user.role == ROLE_VENDOR:
        join_room(relay.vendor_room(user.id))
    logger.info("Socket %s connected for user %s", request.sid, user.id)


@socketio.on("disconnect")
def on_disconnect(reason=None):
    user = _current_user()
    if user is not None and user.role == ROLE_VENDOR:
        emit("vendor-status-change", relay.vendor_status_payload(user, False),
             broadcast=True, include_self=False)
    logger.info("Socket %s disconnected", request.sid)


@socketio.on("join-chat")
@authenticated
def on_join_chat(user, data):
    chat_id = _chat_id(data)
    if chat_id is None:
        emit("error", {"message": "chatId is required"})
        return
    relay.get_chat_for_member(chat_id, user.id)
    join_room(relay.chat_room(chat_id))
    emit("joined-chat", {"chatId": chat_id})


@socketio.on("leave-chat")
@authenticated
def on_leave_chat(user, data):
    chat_id = _chat_id(data)
    leave_room(relay.chat_room(chat_id))
    emit("left-chat", {"chatId": chat_id})


@socketio.on("send-message")
@authenticated
def on_send_message(user, data):
    data = data or {}
    relay.relay_chat_message(
        user,
        _chat_id(data),
        data.get("message"),
        receiver_id=data.get("receiverId"),
        type=data.get("type", "text"),
    )


@socketio.on("mark-messages-read")
@authenticated
def on_mark_messages_read(user, data):
    data = data or {}
    relay.mark_messages_read(user, _chat_id(data), data.get("messageIds"))


@socketio.on("update-order-status")
@authenticated
def on_update_order_status(user, data):
    if not role_has_scope(user.role, "update_order"):
        emit("error", {"message": "Unauthorized"})
        return
    data = data or {}
    relay.relay_order_update(user, data.get("orderId"), data.get("status"), data.get("message"))


@socketio.on("typing-start")
@authenticated
def on_typing_start(user, data):
    chat_id = _chat_id(data)
    relay.get_chat_for_member(chat_id, user.id)
    emit("user-typing", {"userId": user.id, "userName": user.name, "chatId": chat_id},
         to=relay.chat_room(chat_id), include_self=False)


@socketio.on("typing-stop")
@authenticated
def on_typing_stop(user, data):
    chat_id = _chat_id(data)
    relay.get_chat_for_member(chat_id, user.id)
    emit("user-stopped-typing", {"userId": user.id, "chatId": chat_id},
         to=relay.chat_room(chat_id), include_self=False)


@socketio.on("vendor-online")
@authenticated
def on_vendor_online(user, data=None):
    if relay.is_vendor(user):
        emit("vendor-status-change", relay.vendor_status_payload(user, True),
             broadcast=True, include_self=False)


@socketio.on("vendor-offline")
@authenticated
def on_vendor_offline(user, data=None):
    if relay.is_vendor(user):
        emit("vendor-status-change", relay.vendor_status_payload(user, False),
             broadcast=True, include_self=False)


@socketio.on_error_default
def on_socket_error(e):
    logger.exception("Socket handler failed: %s", e)
    emit("error", {"message": "An unexpected error occurred"})
