from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging
import math

from ..core.database_client import get_db, commit_or_rollback
from ..core.auth import get_current_user, get_optional_user
from ..core.errors import BadRequest, NotFound
from ..models.user import User, OfferedSkill, WantedSkill
from ..models.profile import ProfileUpdate, ProfileSetup, SkillAdd
from ..repositories.users import UserDao

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/users", tags=["Users"])


def pagination(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }


# --- Search ---

# GET /api/users?skill=&location=
# Only public, set-up profiles; the caller (if any) is left out.
@router.get("")
def search_users(
    skill: Optional[str] = None,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    caller_id = current_user.id if current_user else None
    users, total = UserDao(db).search_public(
        skill=skill, location=location, exclude_id=caller_id, page=page, limit=limit
    )
    return {
        "users": [u.to_public_dict() for u in users],
        "pagination": pagination(page, limit, total),
    }


# --- Own profile ---

@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)):
    return {"user": current_user.to_dict()}


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Apply only the fields present in the body."""
    changes = body.model_dump(exclude_none=True)

    if "name" in changes:
        current_user.name = changes["name"]
    if "location" in changes:
        current_user.location = changes["location"]
    if "is_public" in changes:
        current_user.is_public = changes["is_public"]
    if "skills_offered" in changes:
        UserDao.replace_offered(current_user, changes["skills_offered"])
    if "skills_wanted" in changes:
        UserDao.replace_wanted(current_user, changes["skills_wanted"])
    if "availability" in changes:
        current_user.set_availability(changes["availability"])
    if "profile_completed" in changes:
        current_user.profile_completed = changes["profile_completed"]

    commit_or_rollback(db, "updating profile")
    db.refresh(current_user)
    logger.info(f"Profile updated for user {current_user.id}: {sorted(changes)}")

    return {"message": "Profile updated successfully", "user": current_user.to_dict()}


@router.put("/profile/setup")
def setup_profile(
    body: ProfileSetup,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    current_user.location = body.location
    # Offered skills are auto-approved at setup
    UserDao.replace_offered(current_user, [
        {**s.model_dump(), "is_approved": True} for s in body.skills_offered
    ])
    UserDao.replace_wanted(current_user, [s.model_dump() for s in body.skills_wanted])
    current_user.set_availability(body.availability.model_dump())
    current_user.is_public = body.is_public
    current_user.profile_completed = True

    commit_or_rollback(db, "completing profile setup")
    db.refresh(current_user)
    logger.info(f"Profile setup completed for user {current_user.id}")

    return {"message": "Profile setup completed successfully", "user": current_user.to_dict()}


# --- Single skill entries ---

@router.post("/skills/offered")
def add_offered_skill(
    body: SkillAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.offers(body.skill):
        raise BadRequest("You already have this skill in your offered skills", error="skill_exists")

    entry = OfferedSkill(skill=body.skill, description=body.description, is_approved=True)
    current_user.skills_offered.append(entry)
    commit_or_rollback(db, "adding offered skill")

    return {"message": "Skill added successfully", "skill": entry.to_dict()}


@router.post("/skills/wanted")
def add_wanted_skill(
    body: SkillAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.wants(body.skill):
        raise BadRequest("You already have this skill in your wanted skills", error="skill_exists")

    entry = WantedSkill(skill=body.skill, description=body.description)
    current_user.skills_wanted.append(entry)
    commit_or_rollback(db, "adding wanted skill")

    return {"message": "Skill added successfully", "skill": entry.to_dict()}


def _remove_at(skills, index: int) -> None:
    if index < 0 or index >= len(skills):
        raise BadRequest("Skill index out of range", error="invalid_index")
    skills.pop(index)


@router.delete("/skills/offered/{index}")
def remove_offered_skill(
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _remove_at(current_user.skills_offered, index)
    commit_or_rollback(db, "removing offered skill")
    return {"message": "Skill removed successfully"}


@router.delete("/skills/wanted/{index}")
def remove_wanted_skill(
    index: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _remove_at(current_user.skills_wanted, index)
    commit_or_rollback(db, "removing wanted skill")
    return {"message": "Skill removed successfully"}


# --- Public profile ---

@router.get("/{user_id}")
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    user = UserDao(db).get(user_id)
    if not user:
        raise NotFound("User does not exist", error="user_not_found")

    if current_user is not None and current_user.id == user.id:
        return {"user": user.to_dict()}

    # Private profiles only expose who they are
    if not user.is_public:
        return {"user": user.to_private_stub()}

    return {"user": user.to_public_dict()}
