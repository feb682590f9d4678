from typing import Literal

from .schema_base import CamelModel


class UserStatusUpdate(CamelModel):
    status: Literal["active", "banned"]
