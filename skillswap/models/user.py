"""
User Model

Handles user accounts, credentials, profile fields, availability and the two
ordered skill lists (offered / wanted).
"""

from sqlalchemy import Column, String, DateTime, Boolean, Integer, Float, ForeignKey
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from .base import Base

AVAILABILITY_SLOTS = ("weekdays", "weekends", "mornings", "afternoons", "evenings")

AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def normalize_skill(name: str) -> str:
    """Canonical form used for every skill-name comparison."""
    return name.strip().lower()


class OfferedSkill(Base):
    """A skill the user can teach"""
    __tablename__ = "skills_offered"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    skill = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")
    is_approved = Column(Boolean, nullable=False, default=True)

    def to_dict(self):
        return {
            "skill": self.skill,
            "description": self.description or "",
            "isApproved": bool(self.is_approved),
        }


class WantedSkill(Base):
    """A skill the user wants to learn"""
    __tablename__ = "skills_wanted"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    skill = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False, default="")

    def to_dict(self):
        return {
            "skill": self.skill,
            "description": self.description or "",
        }


class User(Base):
    """User model for authentication and the public skill profile"""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)

    # Profile
    location = Column(String, nullable=False, default="")
    profile_photo = Column(String, nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=True)
    role = Column(String, nullable=False, default="user")
    profile_completed = Column(Boolean, nullable=False, default=False)
    rating = Column(Float, nullable=False, default=0.0)
    total_exchanges = Column(Integer, nullable=False, default=0)

    # Availability flags, independent of each other
    weekdays = Column(Boolean, nullable=False, default=False)
    weekends = Column(Boolean, nullable=False, default=False)
    mornings = Column(Boolean, nullable=False, default=False)
    afternoons = Column(Boolean, nullable=False, default=False)
    evenings = Column(Boolean, nullable=False, default=False)

    skills_offered = relationship(
        "OfferedSkill",
        order_by="OfferedSkill.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    skills_wanted = relationship(
        "WantedSkill",
        order_by="WantedSkill.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    # False once an admin bans the account
    is_active = Column(Boolean, default=True)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def availability(self) -> dict:
        return {slot: bool(getattr(self, slot)) for slot in AVAILABILITY_SLOTS}

    def set_availability(self, availability: dict) -> None:
        for slot in AVAILABILITY_SLOTS:
            setattr(self, slot, bool(availability.get(slot, False)))

    def offers(self, skill_name: str):
        """Return the offered skill entry matching `skill_name`, if any."""
        wanted = normalize_skill(skill_name)
        for entry in self.skills_offered:
            if normalize_skill(entry.skill) == wanted:
                return entry
        return None

    def wants(self, skill_name: str):
        wanted = normalize_skill(skill_name)
        for entry in self.skills_wanted:
            if normalize_skill(entry.skill) == wanted:
                return entry
        return None

    @property
    def profile_completeness(self) -> int:
        """Percentage of optional profile sections that are filled in."""
        sections = [
            bool(self.location),
            bool(self.profile_photo),
            len(self.skills_offered) > 0,
            len(self.skills_wanted) > 0,
            any(self.availability.values()),
        ]
        return round(100 * sum(sections) / len(sections))

    def to_dict(self):
        """Owner/admin view (exclude password)"""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "location": self.location or "",
            "profilePhoto": self.profile_photo or "",
            "skillsOffered": [s.to_dict() for s in self.skills_offered],
            "skillsWanted": [s.to_dict() for s in self.skills_wanted],
            "availability": self.availability,
            "isPublic": bool(self.is_public),
            "role": self.role,
            "profileCompleted": bool(self.profile_completed),
            "profileCompleteness": self.profile_completeness,
            "rating": self.rating or 0.0,
            "totalExchanges": self.total_exchanges or 0,
            "status": "active" if self.is_active else "banned",
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_public_dict(self):
        """What other users may see of a public profile"""
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location or "",
            "profilePhoto": self.profile_photo or "",
            "skillsOffered": [s.to_dict() for s in self.skills_offered],
            "skillsWanted": [s.to_dict() for s in self.skills_wanted],
            "isPublic": True,
            "rating": self.rating or 0.0,
            "totalExchanges": self.total_exchanges or 0,
        }

    def to_private_stub(self):
        return {"id": self.id, "name": self.name, "isPublic": False}

    def to_party_dict(self):
        """Fields populated on exchange requests and conversations"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "profilePhoto": self.profile_photo or "",
        }
