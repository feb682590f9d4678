from pydantic import Field
from typing import Literal

from .schema_base import CamelModel


class ExchangeRequestCreate(CamelModel):
    to: str = Field(..., min_length=1)
    skill_offered: str = Field(..., min_length=1, max_length=100)
    skill_wanted: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=10, max_length=1000)
    duration: str = Field("1 hour", max_length=50)


class AcceptBody(CamelModel):
    welcome_message: str = Field("", max_length=500)


class RejectBody(CamelModel):
    # Echoed back to the caller only, never stored
    reason: str = Field("", max_length=500)


RequestDirection = Literal["incoming", "outgoing", "all"]
RequestStatus = Literal["pending", "accepted", "rejected", "completed"]
