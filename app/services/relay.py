"""Real-time fan-out over Flask-SocketIO.

Durable state is written and committed first; socket emits follow and are
best-effort. Room names: ``user:<id>``, ``vendor:<id>``, ``chat:<id>``.
"""
import logging

from extensions import socketio
from models import db
from models.chat import Chat, ChatParticipant, ChatMessage
from models.user import User, ROLE_VENDOR
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.services import notifications, orders
from app.utils.clock import utcnow
from app.utils.db import transactional

logger = logging.getLogger(__name__)

NAMESPACE = "/"


def user_room(user_id) -> str:
    return f"user:{user_id}"


def vendor_room(user_id) -> str:
    return f"vendor:{user_id}"


def chat_room(chat_id) -> str:
    return f"chat:{chat_id}"


def is_user_online(user_id) -> bool:
    server = socketio.server
    if server is None:
        return False
    rooms = server.manager.rooms.get(NAMESPACE, {})
    return bool(rooms.get(user_room(user_id)))


def emit(event, payload, room):
    try:
        socketio.emit(event, payload, to=room, namespace=NAMESPACE)
    except Exception:
        logger.exception("Socket emit %s to %s failed", event, room)


def push_notification(notification):
    emit("notification", notification.to_dict(), user_room(notification.user_id))


def notify(user_id, type, title, message, data=None):
    """Persist a notification and push it to the user's live sockets."""
    with transactional("Failed to store notification"):
        notification = notifications.create_notification(user_id, type, title, message, data)
    push_notification(notification)
    return notification


def start_chat(user: User, participant_id) -> Chat:
    if participant_id == user.id:
        raise ValidationError("Cannot start a chat with yourself")
    if db.session.get(User, participant_id) is None:
        raise NotFoundError("User not found")

    existing = (
        Chat.query.join(ChatParticipant)
        .filter(Chat.created_by.in_([user.id, participant_id]))
        .filter(ChatParticipant.user_id.in_([user.id, participant_id]))
        .all()
    )
    for chat in existing:
        if chat.has_member(user.id) and chat.has_member(participant_id):
            return chat

    with transactional("Failed to create chat"):
        chat = Chat(created_by=user.id)
        db.session.add(chat)
        db.session.flush()
        db.session.add(ChatParticipant(chat_id=chat.id, user_id=participant_id))
    return chat


def get_chat_for_member(chat_id, user_id) -> Chat:
    chat = db.session.get(Chat, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    if not chat.has_member(user_id):
        raise AuthorizationError("Access denied to chat room")
    return chat


def _other_member(chat: Chat, user_id):
    members = {chat.created_by} | {p.user_id for p in chat.participants}
    members.discard(user_id)
    return next(iter(members), None)


def chat_history(chat_id, user_id, limit=50):
    get_chat_for_member(chat_id, user_id)
    rows = (
        ChatMessage.query.filter_by(chat_id=chat_id)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(limit)
        .all()
    )
    return list(reversed(rows))


def relay_chat_message(sender: User, chat_id, content, receiver_id=None, type="text") -> ChatMessage:
    """Store a chat message, fan it out to the chat room and, when the
    receiver has no live socket, leave them a message notification."""
    if not content or not str(content).strip():
        raise ValidationError("Message cannot be empty")
    chat = get_chat_for_member(chat_id, sender.id)
    receiver_id = receiver_id or _other_member(chat, sender.id)
    if receiver_id is None or not chat.has_member(receiver_id):
        raise ValidationError("Receiver is not part of this chat")

    with transactional("Failed to store chat message"):
        message = ChatMessage(
            chat_id=chat.id,
            sender_id=sender.id,
            receiver_id=receiver_id,
            content=content,
            type=type or "text",
            status="sent",
        )
        db.session.add(message)

    emit("new-message", message.to_dict(), chat_room(chat.id))

    if not is_user_online(receiver_id):
        try:
            notify(
                receiver_id,
                "message",
                f"New message from {sender.name or 'a user'}",
                str(content)[:100],
                {"chatId": chat.id, "senderId": sender.id},
            )
        except Exception:
            logger.exception("Offline message notification for user %s not stored", receiver_id)
    return message


def mark_messages_read(user: User, chat_id, message_ids) -> int:
    get_chat_for_member(chat_id, user.id)
    ids = [int(i) for i in (message_ids or [])]
    if not ids:
        return 0
    with transactional("Failed to mark messages read"):
        rows = (
            ChatMessage.query.filter(ChatMessage.id.in_(ids))
            .filter_by(chat_id=chat_id, receiver_id=user.id)
            .all()
        )
        now = utcnow()
        for row in rows:
            row.status = "read"
            row.read_at = now
    emit("messages-read", {"messageIds": [r.id for r in rows], "readBy": user.id}, chat_room(chat_id))
    return len(rows)


def relay_order_update(actor: User, order_id, status, message=None):
    """Change an order's status, tell the customer, and always persist an
    order notification for them."""
    order = orders.get_order_for_actor(order_id, actor)
    with transactional("Failed to update order status"):
        orders.set_status(order, status)

    text = message or f"Order status updated to {status}"
    update = {
        "orderId": order.id,
        "status": status,
        "message": text,
        "timestamp": utcnow().isoformat(),
        "vendorId": order.vendor_id,
        "customerId": order.customer_id,
    }
    emit("order-updated", update, user_room(order.customer_id))
    try:
        notify(
            order.customer_id,
            "order",
            "Order Status Update",
            text,
            {"orderId": order.id, "status": status},
        )
    except Exception:
        logger.exception("Order notification for user %s not stored", order.customer_id)
    return order


def vendor_status_payload(user: User, online: bool) -> dict:
    return {"vendorId": user.id, "isOnline": online}


def is_vendor(user: User) -> bool:
    return user.role == ROLE_VENDOR
