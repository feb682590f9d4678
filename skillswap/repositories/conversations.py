"""
ConversationDao

Persistence for per-pair message threads and their messages.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.sql_conversation import SQLConversation, SQLMessage, canonical_pair


class ConversationDao:

    def __init__(self, db: Session):
        self.db = db

    def get(self, conversation_id: str) -> Optional[SQLConversation]:
        return self.db.query(SQLConversation).filter(SQLConversation.id == conversation_id).first()

    def find_for_pair(self, user_a: str, user_b: str) -> Optional[SQLConversation]:
        low, high = canonical_pair(user_a, user_b)
        return (self.db.query(SQLConversation)
                .filter(SQLConversation.participant_low == low,
                        SQLConversation.participant_high == high)
                .first())

    def create(self, user_a: str, user_b: str, exchange_request_id: Optional[str] = None) -> SQLConversation:
        low, high = canonical_pair(user_a, user_b)
        conversation = SQLConversation(
            participant_low=low,
            participant_high=high,
            exchange_request_id=exchange_request_id,
        )
        self.db.add(conversation)
        return conversation

    def get_or_create_for_pair(self, user_a: str, user_b: str,
                               exchange_request_id: Optional[str] = None) -> Tuple[SQLConversation, bool]:
        """Return (conversation, created)."""
        conversation = self.find_for_pair(user_a, user_b)
        if conversation is not None:
            return conversation, False
        return self.create(user_a, user_b, exchange_request_id), True

    @staticmethod
    def append_message(conversation: SQLConversation, sender_id: str, content: str,
                       type: str = "text", file_url: Optional[str] = None,
                       file_name: Optional[str] = None) -> SQLMessage:
        """
        Append a message and move the last-message columns to it.

        Both changes land in the same flush, so a commit never leaves
        `last_message_*` pointing anywhere but the tail.
        """
        now = datetime.utcnow()
        message = SQLMessage(
            sender_id=sender_id,
            content=content,
            type=type,
            status="sent",
            file_url=file_url,
            file_name=file_name,
            created_at=now,
        )
        conversation.messages.append(message)
        conversation.last_message_content = content
        conversation.last_message_sender_id = sender_id
        conversation.last_message_at = now
        conversation.updated_at = now
        return message

    def page_messages(self, conversation_id: str, page: int = 1, limit: int = 50) -> Tuple[List[SQLMessage], int, bool]:
        """
        Page backwards from the tail: page 1 holds the most recent `limit`
        messages. Messages within a page stay in chronological order.

        Returns (messages, total, has_more).
        """
        total = (self.db.query(func.count(SQLMessage.id))
                 .filter(SQLMessage.conversation_id == conversation_id)
                 .scalar()) or 0
        start = max(0, total - page * limit)
        end = max(0, total - (page - 1) * limit)
        if end <= start:
            return [], total, start > 0

        messages = (self.db.query(SQLMessage)
                    .filter(SQLMessage.conversation_id == conversation_id)
                    .order_by(SQLMessage.position)
                    .offset(start)
                    .limit(end - start)
                    .all())
        return messages, total, start > 0

    def _unread_for(self, conversation_id: str, reader_id: str):
        return (self.db.query(SQLMessage)
                .filter(SQLMessage.conversation_id == conversation_id,
                        SQLMessage.sender_id != reader_id,
                        SQLMessage.status != "read"))

    def count_unread(self, conversation_id: str, reader_id: str) -> int:
        return self._unread_for(conversation_id, reader_id).count()

    def mark_read(self, conversation_id: str, reader_id: str) -> int:
        """Flip every message not sent by `reader_id` to read; return how many changed."""
        messages = self._unread_for(conversation_id, reader_id).all()
        for message in messages:
            message.status = "read"
        return len(messages)

    def list_for_user(self, user_id: str) -> List[SQLConversation]:
        return (self.db.query(SQLConversation)
                .filter(or_(SQLConversation.participant_low == user_id,
                            SQLConversation.participant_high == user_id))
                .order_by(SQLConversation.updated_at.desc(), SQLConversation.created_at.desc())
                .all())

    def count_messages(self, conversation_id: str) -> int:
        return (self.db.query(func.count(SQLMessage.id))
                .filter(SQLMessage.conversation_id == conversation_id)
                .scalar()) or 0

    def count(self) -> int:
        return self.db.query(func.count(SQLConversation.id)).scalar() or 0
