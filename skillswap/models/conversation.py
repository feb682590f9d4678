from pydantic import Field, model_validator
from typing import Optional, Literal

from .schema_base import CamelModel


class ConversationCreate(CamelModel):
    participant_id: str = Field(..., min_length=1)
    initial_message: Optional[str] = Field(None, min_length=1, max_length=2000)


class MessageCreate(CamelModel):
    content: str = Field(..., min_length=1, max_length=2000)
    # "system" messages are only written by the platform
    type: Literal["text", "file"] = "text"
    file_url: Optional[str] = None
    file_name: Optional[str] = None

    @model_validator(mode="after")
    def file_fields_only_for_files(self):
        if self.type != "file":
            self.file_url = None
            self.file_name = None
        return self
