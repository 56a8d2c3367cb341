from models import db, BIGINT
from datetime import datetime


class Chat(db.Model):
    __tablename__ = "chats"

    id = db.Column(BIGINT, primary_key=True)
    created_by = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    participants = db.relationship("ChatParticipant", backref="chat", cascade="all, delete-orphan", lazy=True)

    def has_member(self, user_id) -> bool:
        if self.created_by == user_id:
            return True
        return any(p.user_id == user_id for p in self.participants)

    def to_dict(self):
        return {
            "id": self.id,
            "createdBy": self.created_by,
            "participants": [p.user_id for p in self.participants],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class ChatParticipant(db.Model):
    __tablename__ = "chat_participants"
    __table_args__ = (
        db.UniqueConstraint("chat_id", "user_id", name="uq_chat_participant"),
    )

    id = db.Column(BIGINT, primary_key=True)
    chat_id = db.Column(BIGINT, db.ForeignKey("chats.id"), nullable=False)
    user_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)


class ChatMessage(db.Model):
    __tablename__ = "chat_messages"

    id = db.Column(BIGINT, primary_key=True)
    chat_id = db.Column(BIGINT, db.ForeignKey("chats.id"), nullable=False, index=True)
    sender_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)
    receiver_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(10), nullable=False, default="text")      # text, image, file
    status = db.Column(db.String(10), nullable=False, default="sent")    # sent, delivered, read
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    read_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "chatId": self.chat_id,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "message": self.content,
            "type": self.type,
            "status": self.status,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
