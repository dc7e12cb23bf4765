"""This file contains the message model for the application."""

from enum import Enum
from pydantic import Field

from app.models.base import BaseModel


class MessageRole(str, Enum):
    """Author of a conversation message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """Message model for storing conversation messages.

    Attributes:
        id: MongoDB ObjectId as string
        thread_id: Id of the owning thread
        role: Message author; system messages are never stored
        content: Message text
        created_at: Ordering key within the thread
    """

    thread_id: str = Field(..., alias="threadId")
    role: MessageRole
    content: str = ""
