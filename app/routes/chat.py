from flask import Blueprint, request
from app.schemas.orders import StartChatRequest, ChatMessageRequest
from app.services import relay
from app.utils import auth_required, ok, role_required, validate_schema
from app.version import API_PREFIX

chat_bp = Blueprint("chat", __name__, url_prefix=f"{API_PREFIX}/chats")


@chat_bp.before_request
@auth_required
@role_required(["customer:chat", "vendor:chat", "admin"])
def _require_login():
    return None


@chat_bp.route("", methods=["POST"])
@validate_schema(StartChatRequest)
def start_chat():
    chat = relay.start_chat(request.user, request.validated_data.participantId)
    return ok(message="Chat ready", chat=chat.to_dict())


@chat_bp.route("/<int:chat_id>/messages", methods=["GET"])
def list_messages(chat_id):
    limit = min(request.args.get("limit", 50, type=int), 200)
    messages = relay.chat_history(chat_id, request.user.id, limit=limit)
    return ok(message="Messages fetched", messages=[m.to_dict() for m in messages])


@chat_bp.route("/<int:chat_id>/messages", methods=["POST"])
@validate_schema(ChatMessageRequest)
def send_message(chat_id):
    """HTTP fallback for the send-message socket event."""
    data: ChatMessageRequest = request.validated_data
    message = relay.relay_chat_message(
        request.user, chat_id, data.message, receiver_id=data.receiverId, type=data.type
    )
    return ok(message="Message sent", chatMessage=message.to_dict(), status=201)
