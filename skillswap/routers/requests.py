from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from ..core.database_client import get_db, commit_or_rollback
from ..core.auth import get_current_user
from ..core.errors import BadRequest, NotFound, PermissionDenied
from ..models.user import User
from ..models.exchange import (
    ExchangeRequestCreate, AcceptBody, RejectBody, RequestDirection, RequestStatus
)
from ..repositories.users import UserDao
from ..repositories.exchanges import ExchangeRequestDao
from ..repositories.conversations import ConversationDao

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/requests", tags=["Exchange Requests"])

ACCEPTED_TEXT = "Skill exchange request accepted!"


# --- HELPERS ---

def load_request(dao: ExchangeRequestDao, request_id: str):
    request = dao.get(request_id)
    if not request:
        raise NotFound("Swap request does not exist", error="request_not_found")
    return request


def ensure_pending(request) -> None:
    if not request.is_pending:
        raise BadRequest(f"Request has already been {request.status}", error="request_already_processed")


# --- READ ---

@router.get("")
def list_requests(
    type: RequestDirection = "all",
    status: Optional[RequestStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    requests = ExchangeRequestDao(db).list_for_user(current_user.id, direction=type, status=status)
    return {
        "requests": {
            "incoming": [r.to_dict() for r in requests if r.to_user_id == current_user.id],
            "outgoing": [r.to_dict() for r in requests if r.from_user_id == current_user.id],
            "all": [r.to_dict() for r in requests],
        }
    }


@router.get("/{request_id}")
def get_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = load_request(ExchangeRequestDao(db), request_id)
    if not request.involves(current_user.id):
        raise PermissionDenied("You can only view your own requests")
    return {"request": request.to_dict()}


# --- CREATE ---

@router.post("", status_code=status.HTTP_201_CREATED)
def create_request(
    body: ExchangeRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Propose a skill swap. Preconditions are checked in order and each one
    fails on its own: self-request, unknown recipient, recipient does not
    offer `skillWanted`, caller does not offer `skillOffered`, and an
    identical request already pending.
    """
    if body.to == current_user.id:
        raise BadRequest("You cannot send a request to yourself")

    recipient = UserDao(db).get(body.to)
    if not recipient:
        raise NotFound("Target user does not exist", error="user_not_found")

    wanted = recipient.offers(body.skill_wanted)
    if wanted is None:
        raise BadRequest("Target user does not offer this skill", error="skill_not_available")

    offered = current_user.offers(body.skill_offered)
    if offered is None:
        raise BadRequest("You do not have this skill to offer", error="skill_not_available")

    dao = ExchangeRequestDao(db)
    if dao.find_pending_duplicate(current_user.id, recipient.id, offered.skill, wanted.skill):
        raise BadRequest("You already have a pending request for this skill exchange",
                         error="request_exists")

    # Store the spelling found on each user's skill list
    request = dao.create(
        from_user_id=current_user.id,
        to_user_id=recipient.id,
        skill_offered=offered.skill,
        skill_wanted=wanted.skill,
        message=body.message,
        duration=body.duration,
    )
    commit_or_rollback(db, "creating swap request")
    db.refresh(request)
    logger.info(f"Swap request {request.id} created: {current_user.id} -> {recipient.id}")

    return {"message": "Swap request created successfully", "request": request.to_dict()}


# --- TRANSITIONS ---

@router.put("/{request_id}/accept")
def accept_request(
    request_id: str,
    body: Optional[AcceptBody] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Accept a pending request, then locate-or-create the pair's conversation
    and append a system message announcing it. Status change, conversation
    and message are committed together.
    """
    body = body or AcceptBody()
    request = load_request(ExchangeRequestDao(db), request_id)

    ensure_pending(request)
    if request.to_user_id != current_user.id:
        raise PermissionDenied("You can only accept requests sent to you")

    request.status = "accepted"

    conversations = ConversationDao(db)
    conversation, created = conversations.get_or_create_for_pair(
        request.from_user_id, request.to_user_id, exchange_request_id=request.id
    )
    content = ACCEPTED_TEXT
    if body.welcome_message:
        content = f"{ACCEPTED_TEXT}\n\n{body.welcome_message}"
    conversations.append_message(conversation, sender_id=current_user.id, content=content, type="system")

    commit_or_rollback(db, "accepting swap request")
    db.refresh(request)
    logger.info(f"Swap request {request.id} accepted by {current_user.id}"
                f" (conversation {conversation.id}, new={created})")

    return {
        "message": "Request accepted successfully",
        "request": request.to_dict(),
        "conversationId": conversation.id,
    }


@router.put("/{request_id}/reject")
def reject_request(
    request_id: str,
    body: Optional[RejectBody] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    body = body or RejectBody()
    request = load_request(ExchangeRequestDao(db), request_id)

    ensure_pending(request)
    if request.to_user_id != current_user.id:
        raise PermissionDenied("You can only reject requests sent to you")

    request.status = "rejected"
    commit_or_rollback(db, "rejecting swap request")
    db.refresh(request)
    logger.info(f"Swap request {request.id} rejected by {current_user.id}")

    response = {"message": "Request rejected successfully", "request": request.to_dict()}
    if body.reason:
        response["reason"] = body.reason
    return response


@router.delete("/{request_id}")
def cancel_request(
    request_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    dao = ExchangeRequestDao(db)
    request = load_request(dao, request_id)

    if request.from_user_id != current_user.id:
        raise PermissionDenied("You can only cancel requests you sent")
    if not request.is_pending:
        raise BadRequest("Only pending requests can be cancelled", error="cannot_cancel")

    dao.delete(request)
    commit_or_rollback(db, "cancelling swap request")
    logger.info(f"Swap request {request_id} cancelled by {current_user.id}")

    return {"message": "Request cancelled successfully"}
