from pydantic import Field, field_validator
from typing import List, Optional

from .schema_base import CamelModel


class OfferedSkillIn(CamelModel):
    skill: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    is_approved: bool = True


class WantedSkillIn(CamelModel):
    skill: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)


class Availability(CamelModel):
    weekdays: bool = False
    weekends: bool = False
    mornings: bool = False
    afternoons: bool = False
    evenings: bool = False

    def any_selected(self) -> bool:
        return any(self.model_dump().values())


class ProfileUpdate(CamelModel):
    """Partial update: only fields present in the body are applied."""

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    location: Optional[str] = Field(None, max_length=100)
    is_public: Optional[bool] = None
    skills_offered: Optional[List[OfferedSkillIn]] = None
    skills_wanted: Optional[List[WantedSkillIn]] = None
    availability: Optional[Availability] = None
    profile_completed: Optional[bool] = None


class ProfileSetup(CamelModel):
    """First-time setup wizard payload."""

    location: str = Field(..., min_length=1, max_length=100)
    skills_offered: List[OfferedSkillIn]
    skills_wanted: List[WantedSkillIn]
    availability: Availability
    is_public: bool

    @field_validator("skills_offered")
    @classmethod
    def at_least_one_offered(cls, v):
        if not v:
            raise ValueError("At least one skill offered is required")
        return v

    @field_validator("skills_wanted")
    @classmethod
    def at_least_one_wanted(cls, v):
        if not v:
            raise ValueError("At least one skill wanted is required")
        return v

    @field_validator("availability")
    @classmethod
    def at_least_one_slot(cls, v):
        if not v.any_selected():
            raise ValueError("At least one availability option must be selected")
        return v


class SkillAdd(CamelModel):
    skill: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
