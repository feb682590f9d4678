from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from .base import Base

REQUEST_STATUSES = ("pending", "accepted", "rejected", "completed")


class SQLExchangeRequest(Base):
    """A directional proposal to trade one taught skill for another."""
    __tablename__ = "exchange_requests"
    __table_args__ = (
        Index("ix_exchange_requests_pair_skills",
              "from_user_id", "to_user_id", "skill_offered", "skill_wanted"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    from_user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    skill_offered = Column(String(100), nullable=False)
    skill_wanted = Column(String(100), nullable=False)
    message = Column(String(1000), nullable=False)
    duration = Column(String(50), nullable=False, default="1 hour")
    status = Column(Enum(*REQUEST_STATUSES, name="request_statuses"), nullable=False, default="pending")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sender = relationship("User", foreign_keys=[from_user_id], lazy="joined")
    recipient = relationship("User", foreign_keys=[to_user_id], lazy="joined")

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)

    def to_dict(self):
        return {
            "id": self.id,
            "from": self.sender.to_party_dict() if self.sender else {"id": self.from_user_id},
            "to": self.recipient.to_party_dict() if self.recipient else {"id": self.to_user_id},
            "skillOffered": self.skill_offered,
            "skillWanted": self.skill_wanted,
            "message": self.message,
            "duration": self.duration,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
