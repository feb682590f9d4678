from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from .base import Base

MESSAGE_TYPES = ("text", "file", "system")
MESSAGE_STATUSES = ("sent", "delivered", "read")


def canonical_pair(user_a: str, user_b: str):
    """Order-independent key for a pair of users."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


class SQLMessage(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(String, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    # Append order within the conversation
    position = Column(Integer, nullable=False)

    sender_id = Column(String, ForeignKey("users.id"), nullable=False)
    content = Column(String(2000), nullable=False)
    type = Column(Enum(*MESSAGE_TYPES, name="message_types"), nullable=False, default="text")
    status = Column(Enum(*MESSAGE_STATUSES, name="message_statuses"), nullable=False, default="sent")
    file_url = Column(String)
    file_name = Column(String)

    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "senderId": self.sender_id,
            "content": self.content,
            "type": self.type,
            "status": self.status,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
            "fileUrl": self.file_url,
            "fileName": self.file_name,
        }


class SQLConversation(Base):
    """The unique message thread for an unordered pair of users."""
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("participant_low", "participant_high", name="uq_conversation_participants"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # participant_low <= participant_high, see canonical_pair()
    participant_low = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_high = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    exchange_request_id = Column(String, ForeignKey("exchange_requests.id", ondelete="SET NULL"), nullable=True)

    # Mirrors the tail of `messages`; written in the same commit as the append
    last_message_content = Column(String(2000))
    last_message_sender_id = Column(String)
    last_message_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    messages = relationship(
        "SQLMessage",
        order_by="SQLMessage.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    low_user = relationship("User", foreign_keys=[participant_low])
    high_user = relationship("User", foreign_keys=[participant_high])
    exchange_request = relationship("SQLExchangeRequest")

    @property
    def participant_ids(self):
        return [self.participant_low, self.participant_high]

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participant_ids

    def other_participant(self, user_id: str):
        return self.high_user if self.participant_low == user_id else self.low_user

    def last_message_dict(self):
        if self.last_message_at is None:
            return None
        return {
            "content": self.last_message_content,
            "sender": self.last_message_sender_id,
            "timestamp": self.last_message_at.isoformat(),
        }
