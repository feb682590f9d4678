from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from ..core.database_client import get_db, commit_or_rollback
from ..core.auth import require_admin
from ..core.errors import BadRequest, NotFound
from ..models.user import User
from ..models.admin import UserStatusUpdate
from ..repositories.users import UserDao
from ..repositories.exchanges import ExchangeRequestDao
from ..repositories.conversations import ConversationDao
from .users import pagination

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/stats")
def stats(db: Session = Depends(get_db)):
    users = UserDao(db)
    requests = ExchangeRequestDao(db)

    total_requests = requests.count()
    accepted = requests.count(status="accepted")
    success_rate = (accepted / total_requests) * 100 if total_requests > 0 else 0

    return {
        "users": {
            "total": users.count(),
            "active": users.count(profile_completed=True),
            "newThisMonth": users.count_new(days=30),
        },
        "requests": {
            "total": total_requests,
            "pending": requests.count(status="pending"),
            "accepted": accepted,
            "rejected": requests.count(status="rejected"),
            "successRate": round(success_rate, 1),
        },
        "conversations": {
            "total": ConversationDao(db).count(),
        },
    }


@router.get("/users")
def list_users(
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    users, total = UserDao(db).list_all(search=search, page=page, limit=limit)
    return {
        "users": [u.to_dict() for u in users],
        "pagination": pagination(page, limit, total),
    }


# PUT /api/admin/users/{id}/status  {"status": "active" | "banned"}
@router.put("/users/{user_id}/status")
def update_user_status(
    user_id: str,
    body: UserStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = UserDao(db).get(user_id)
    if not user:
        raise NotFound("User does not exist", error="user_not_found")

    if user.id == admin.id:
        raise BadRequest("You cannot change your own status", error="invalid_action")

    user.is_active = body.status == "active"
    commit_or_rollback(db, "updating user status")
    db.refresh(user)

    verb = "banned" if body.status == "banned" else "unbanned"
    logger.info(f"User {user.id} {verb} by admin {admin.id}")
    return {"message": f"User {verb} successfully", "user": user.to_dict()}


@router.get("/activity")
def activity(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    """Recent sign-ups and swap requests, newest first."""
    events = [
        {
            "type": "user_joined",
            "description": f"{u.name} joined the platform",
            "timestamp": u.created_at,
            "user": u.name,
        }
        for u in UserDao(db).recent(limit=limit)
    ]
    events += [
        {
            "type": "request_created",
            "description": f"{r.sender.name} sent a skill exchange request to {r.recipient.name}",
            "timestamp": r.created_at,
            "status": r.status,
        }
        for r in ExchangeRequestDao(db).recent(limit=limit)
    ]

    events.sort(key=lambda e: e["timestamp"], reverse=True)
    for event in events:
        event["timestamp"] = event["timestamp"].isoformat()
    return {"activity": events[:limit]}
