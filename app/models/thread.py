"""This file contains the thread model for the application."""

from datetime import datetime
from typing import Optional
from pydantic import Field

from app.models.base import BaseModel


class Thread(BaseModel):
    """Thread model for storing conversation threads.

    Attributes:
        id: MongoDB ObjectId as string
        user_id: Identity-provider id of the owning user
        title: Long-form title, used as a fallback label
        label: Short display string shown in the thread list
        last_message: Preview of the most recent message
        created_at: When the thread was created, never rewritten
        updated_at: Last metadata change, never moves backwards
    """

    user_id: str = Field(..., alias="userId")
    title: Optional[str] = None
    label: Optional[str] = None
    last_message: Optional[str] = Field(default=None, alias="lastMessage")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
