"""Message schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from app.models.message import MessageRole
from app.schemas.threads import CamelModel


class MessageCreate(CamelModel):
    """Schema for appending a message to a thread."""

    role: MessageRole
    content: str = Field(..., min_length=1)

    @field_validator("role")
    @classmethod
    def validate_stored_role(cls, v: MessageRole) -> MessageRole:
        """Reject system messages, which are never stored."""
        if v == MessageRole.SYSTEM:
            raise ValueError("system messages cannot be stored")
        return v


class MessageResponse(CamelModel):
    """Schema for message response."""

    id: str
    thread_id: str
    role: MessageRole
    content: str
    created_at: datetime


class FirstExchangeCreate(CamelModel):
    """Schema for storing the opening exchange of a thread."""

    user_message: str = Field(..., min_length=1)
    assistant_message: str = Field(..., min_length=1)


class ChatRequest(CamelModel):
    """Schema for a streamed chat turn."""

    thread_id: Optional[str] = Field(None, description="Existing thread, or None to start one")
    message: str = Field(..., min_length=1, description="User message text")
    system_prompt: Optional[str] = Field(None, description="Overrides the default system prompt")
