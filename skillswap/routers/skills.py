from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional, Literal

from ..core.database_client import get_db
from ..core.auth import get_optional_user
from ..models.user import User
from ..repositories.users import UserDao
from .users import pagination

router = APIRouter(prefix="/api/skills", tags=["Skills"])

SortField = Literal["createdAt", "rating", "totalExchanges", "name"]


def _with_contact_flag(users, caller: Optional[User]):
    return [
        {**u.to_public_dict(), "canContact": caller is not None and caller.id != u.id}
        for u in users
    ]


def _round_rating(value) -> float:
    return round(float(value or 0), 1)


# GET /api/skills/browse
# Search plus facet counts for the browse page filters.
@router.get("/browse")
def browse(
    skill: Optional[str] = None,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    dao = UserDao(db)
    users, total = dao.search_public(
        skill=skill,
        location=location,
        exclude_id=current_user.id if current_user else None,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "users": _with_contact_flag(users, current_user),
        "pagination": pagination(page, limit, total),
        "filters": {
            "skills": [{"name": name, "count": count} for name, count, _, _ in dao.skill_counts(limit=100)],
            "locations": [{"name": name, "count": count} for name, count in dao.location_counts(limit=50)],
        },
    }


@router.get("/popular")
def popular(limit: int = Query(20, ge=1, le=50), db: Session = Depends(get_db)):
    rows = UserDao(db).skill_counts(limit=limit)
    return {
        "skills": [
            {
                "name": name,
                "userCount": count,
                "averageRating": _round_rating(avg_rating),
                "totalExchanges": int(exchanges or 0),
            }
            for name, count, avg_rating, exchanges in rows
        ]
    }


@router.get("/search")
def search(q: str = Query(..., min_length=1), limit: int = Query(10, ge=1, le=20),
           db: Session = Depends(get_db)):
    rows = UserDao(db).skill_counts(limit=limit, name_contains=q)
    return {"skills": [{"name": name, "userCount": count} for name, count, _, _ in rows]}


# GET /api/skills/{skill_name}
# Users offering exactly this skill (case-insensitive), best rated first.
@router.get("/{skill_name}")
def skill_detail(
    skill_name: str,
    location: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    dao = UserDao(db)
    users, total = dao.search_public(
        skill=skill_name,
        exact_skill=True,
        location=location,
        exclude_id=current_user.id if current_user else None,
        page=page,
        limit=limit,
        sort_by="rating",
    )
    total_users, avg_rating, exchanges = dao.skill_stats(skill_name)
    return {
        "skill": {
            "name": skill_name,
            "totalUsers": total_users or 0,
            "averageRating": _round_rating(avg_rating),
            "totalExchanges": int(exchanges or 0),
        },
        "users": _with_contact_flag(users, current_user),
        "pagination": pagination(page, limit, total),
    }
