"""
UserDao

Persistence for user accounts and their skill lists. Handlers never build
user queries themselves; they go through this class so the storage engine
stays behind one seam.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ..models.user import User, OfferedSkill, WantedSkill, AVATAR_URL


def contains_pattern(text: str) -> str:
    """Substring LIKE pattern with the user's own wildcards escaped."""
    escaped = text.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class UserDao:

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def create(self, name: str, email: str, hashed_password: str, role: str = "user") -> User:
        user = User(
            name=name,
            email=email.strip().lower(),
            hashed_password=hashed_password,
            profile_photo=AVATAR_URL.format(seed=name),
            profile_completed=False,
            role=role,
            is_active=True,
        )
        self.db.add(user)
        return user

    # --- Skill lists ---

    @staticmethod
    def replace_offered(user: User, skills: List[dict]) -> None:
        user.skills_offered = [
            OfferedSkill(position=i, skill=s["skill"], description=s.get("description", ""),
                         is_approved=s.get("is_approved", True))
            for i, s in enumerate(skills)
        ]

    @staticmethod
    def replace_wanted(user: User, skills: List[dict]) -> None:
        user.skills_wanted = [
            WantedSkill(position=i, skill=s["skill"], description=s.get("description", ""))
            for i, s in enumerate(skills)
        ]

    # --- Public search ---

    def _discoverable(self, exclude_id: Optional[str]):
        query = self.db.query(User).filter(User.is_public.is_(True),
                                           User.profile_completed.is_(True),
                                           User.is_active.is_(True))
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query

    def search_public(self, skill: Optional[str] = None, location: Optional[str] = None,
                      exclude_id: Optional[str] = None, page: int = 1, limit: int = 20,
                      sort_by: str = "createdAt", sort_order: str = "desc",
                      exact_skill: bool = False) -> Tuple[List[User], int]:
        """
        Page through public, set-up profiles.

        `skill` matches offered skill names case-insensitively, as a substring
        unless `exact_skill` is set. `location` is always a substring match.
        """
        query = self._discoverable(exclude_id)

        if skill:
            if exact_skill:
                skill_filter = func.lower(func.trim(OfferedSkill.skill)) == func.lower(skill.strip())
            else:
                skill_filter = OfferedSkill.skill.ilike(contains_pattern(skill), escape="\\")
            matching = self.db.query(OfferedSkill.user_id).filter(skill_filter)
            query = query.filter(User.id.in_(matching))

        if location:
            query = query.filter(User.location.ilike(contains_pattern(location), escape="\\"))

        total = query.count()

        sort_columns = {
            "createdAt": User.created_at,
            "rating": User.rating,
            "totalExchanges": User.total_exchanges,
            "name": User.name,
        }
        column = sort_columns.get(sort_by, User.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()

        users = (query.options(selectinload(User.skills_offered), selectinload(User.skills_wanted))
                 .order_by(ordering, User.id)
                 .offset((page - 1) * limit)
                 .limit(limit)
                 .all())
        return users, total

    # --- Skill catalogue aggregations ---

    def skill_counts(self, limit: int = 100, name_contains: Optional[str] = None):
        """(skill name, user count, average rating, total exchanges) for discoverable users."""
        query = (self.db.query(OfferedSkill.skill,
                               func.count(OfferedSkill.id),
                               func.avg(User.rating),
                               func.sum(User.total_exchanges))
                 .join(User, User.id == OfferedSkill.user_id)
                 .filter(User.is_public.is_(True), User.profile_completed.is_(True),
                         User.is_active.is_(True)))
        if name_contains:
            query = query.filter(OfferedSkill.skill.ilike(contains_pattern(name_contains), escape="\\"))
        return (query.group_by(OfferedSkill.skill)
                .order_by(func.count(OfferedSkill.id).desc(), OfferedSkill.skill)
                .limit(limit)
                .all())

    def location_counts(self, limit: int = 50):
        return (self.db.query(User.location, func.count(User.id))
                .filter(User.is_public.is_(True), User.profile_completed.is_(True),
                        User.is_active.is_(True), User.location != "")
                .group_by(User.location)
                .order_by(func.count(User.id).desc(), User.location)
                .limit(limit)
                .all())

    def skill_stats(self, skill_name: str):
        """(users offering the skill, average rating, total exchanges), exact name match."""
        matching = (self.db.query(OfferedSkill.user_id)
                    .filter(func.lower(func.trim(OfferedSkill.skill)) == func.lower(skill_name.strip())))
        return (self.db.query(func.count(User.id), func.avg(User.rating), func.sum(User.total_exchanges))
                .filter(User.is_public.is_(True), User.profile_completed.is_(True),
                        User.is_active.is_(True), User.id.in_(matching))
                .one())

    # --- Admin ---

    def list_all(self, search: str = "", page: int = 1, limit: int = 20) -> Tuple[List[User], int]:
        query = self.db.query(User)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(or_(User.name.ilike(pattern, escape="\\"),
                                     User.email.ilike(pattern, escape="\\")))
        total = query.count()
        users = (query.order_by(User.created_at.desc(), User.id)
                 .offset((page - 1) * limit)
                 .limit(limit)
                 .all())
        return users, total

    def count(self, profile_completed: Optional[bool] = None, created_since: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(User.id))
        if profile_completed is not None:
            query = query.filter(User.profile_completed.is_(profile_completed))
        if created_since is not None:
            query = query.filter(User.created_at >= created_since)
        return query.scalar() or 0

    def count_new(self, days: int = 30) -> int:
        return self.count(created_since=datetime.utcnow() - timedelta(days=days))

    def recent(self, limit: int = 5) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc()).limit(limit).all()
