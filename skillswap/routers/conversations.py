from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from ..core.database_client import get_db, commit_or_rollback
from ..core.auth import get_current_user
from ..core.errors import BadRequest, NotFound, PermissionDenied
from ..models.user import User
from ..models.conversation import ConversationCreate, MessageCreate
from ..repositories.users import UserDao
from ..repositories.conversations import ConversationDao

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


def load_for_participant(dao: ConversationDao, conversation_id: str, user: User):
    conversation = dao.get(conversation_id)
    if not conversation:
        raise NotFound("Conversation does not exist", error="conversation_not_found")
    if not conversation.has_participant(user.id):
        raise PermissionDenied("You are not a participant in this conversation")
    return conversation


def _party(user):
    return user.to_party_dict() if user is not None else None


def _exchange_request(conversation):
    request = conversation.exchange_request
    return request.to_dict() if request is not None else None


@router.get("")
def list_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    dao = ConversationDao(db)
    conversations = dao.list_for_user(current_user.id)
    return {
        "conversations": [
            {
                "id": c.id,
                "otherUser": _party(c.other_participant(current_user.id)),
                "lastMessage": c.last_message_dict(),
                "swapRequest": _exchange_request(c),
                "messageCount": dao.count_messages(c.id),
                "unreadCount": dao.count_unread(c.id, current_user.id),
                "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
            }
            for c in conversations
        ]
    }


@router.post("")
def create_conversation(
    body: ConversationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Open a direct conversation. Idempotent per pair: if one already exists
    its id is returned with 200 instead of creating another.
    """
    if body.participant_id == current_user.id:
        raise BadRequest("You cannot create a conversation with yourself")

    other = UserDao(db).get(body.participant_id)
    if not other:
        raise NotFound("Other participant does not exist", error="user_not_found")

    dao = ConversationDao(db)
    existing = dao.find_for_pair(current_user.id, other.id)
    if existing:
        return {"message": "Conversation already exists", "conversationId": existing.id}

    conversation = dao.create(current_user.id, other.id)
    if body.initial_message:
        dao.append_message(conversation, sender_id=current_user.id, content=body.initial_message)

    commit_or_rollback(db, "creating conversation")
    logger.info(f"Conversation {conversation.id} created between {current_user.id} and {other.id}")

    return JSONResponse(
        status_code=201,
        content={"message": "Conversation created successfully", "conversationId": conversation.id},
    )


@router.get("/{conversation_id}")
def get_conversation(
    conversation_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Return one page of messages (page 1 = most recent) and, as a side effect,
    mark everything the other participant sent as read.
    """
    dao = ConversationDao(db)
    conversation = load_for_participant(dao, conversation_id, current_user)

    messages, total, has_more = dao.page_messages(conversation.id, page=page, limit=limit)

    if dao.mark_read(conversation.id, current_user.id):
        commit_or_rollback(db, "marking messages as read")

    return {
        "conversation": {
            "id": conversation.id,
            "participants": [_party(conversation.low_user), _party(conversation.high_user)],
            "otherUser": _party(conversation.other_participant(current_user.id)),
            "swapRequest": _exchange_request(conversation),
            "messages": [m.to_dict() for m in messages],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "hasMore": has_more,
            },
        }
    }


@router.post("/{conversation_id}/messages", status_code=201)
def send_message(
    conversation_id: str,
    body: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    dao = ConversationDao(db)
    conversation = load_for_participant(dao, conversation_id, current_user)

    message = dao.append_message(
        conversation,
        sender_id=current_user.id,
        content=body.content,
        type=body.type,
        file_url=body.file_url,
        file_name=body.file_name,
    )
    commit_or_rollback(db, "sending message")
    db.refresh(message)

    return {"message": "Message sent successfully", "messageData": message.to_dict()}


@router.put("/{conversation_id}/read")
def mark_as_read(
    conversation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    dao = ConversationDao(db)
    conversation = load_for_participant(dao, conversation_id, current_user)

    updated = dao.mark_read(conversation.id, current_user.id)
    if updated:
        commit_or_rollback(db, "marking messages as read")

    return {"message": "Messages marked as read", "updatedCount": updated}
