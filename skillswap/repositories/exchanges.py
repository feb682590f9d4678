"""
ExchangeRequestDao

Persistence for swap requests between two users.
"""

from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.sql_exchange import SQLExchangeRequest


class ExchangeRequestDao:

    def __init__(self, db: Session):
        self.db = db

    def get(self, request_id: str) -> Optional[SQLExchangeRequest]:
        return self.db.query(SQLExchangeRequest).filter(SQLExchangeRequest.id == request_id).first()

    def create(self, from_user_id: str, to_user_id: str, skill_offered: str,
               skill_wanted: str, message: str, duration: str = "1 hour") -> SQLExchangeRequest:
        request = SQLExchangeRequest(
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            skill_offered=skill_offered,
            skill_wanted=skill_wanted,
            message=message,
            duration=duration or "1 hour",
            status="pending",
        )
        self.db.add(request)
        return request

    def find_pending_duplicate(self, from_user_id: str, to_user_id: str,
                               skill_offered: str, skill_wanted: str) -> Optional[SQLExchangeRequest]:
        """Skill names must be the spellings stored on the two users' skill lists."""
        return (self.db.query(SQLExchangeRequest)
                .filter(SQLExchangeRequest.from_user_id == from_user_id,
                        SQLExchangeRequest.to_user_id == to_user_id,
                        SQLExchangeRequest.skill_offered == skill_offered,
                        SQLExchangeRequest.skill_wanted == skill_wanted,
                        SQLExchangeRequest.status == "pending")
                .first())

    def list_for_user(self, user_id: str, direction: str = "all",
                      status: Optional[str] = None) -> List[SQLExchangeRequest]:
        query = self.db.query(SQLExchangeRequest)
        if direction == "incoming":
            query = query.filter(SQLExchangeRequest.to_user_id == user_id)
        elif direction == "outgoing":
            query = query.filter(SQLExchangeRequest.from_user_id == user_id)
        else:
            query = query.filter(or_(SQLExchangeRequest.from_user_id == user_id,
                                     SQLExchangeRequest.to_user_id == user_id))
        if status:
            query = query.filter(SQLExchangeRequest.status == status)
        return query.order_by(SQLExchangeRequest.created_at.desc()).all()

    def delete(self, request: SQLExchangeRequest) -> None:
        self.db.delete(request)

    def count(self, status: Optional[str] = None) -> int:
        query = self.db.query(func.count(SQLExchangeRequest.id))
        if status:
            query = query.filter(SQLExchangeRequest.status == status)
        return query.scalar() or 0

    def recent(self, limit: int = 5) -> List[SQLExchangeRequest]:
        return (self.db.query(SQLExchangeRequest)
                .order_by(SQLExchangeRequest.created_at.desc())
                .limit(limit)
                .all())
