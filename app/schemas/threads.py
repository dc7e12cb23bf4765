"""Thread schemas for request/response validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits the camelCase keys the web client uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ThreadResponse(CamelModel):
    """Schema for thread response."""

    id: str = Field(..., description="Thread id")
    user_id: str = Field(..., description="Owning user id")
    title: Optional[str] = Field(None, description="Long-form title")
    label: str = Field(..., description="Short display label")
    last_message: str = Field("", description="Preview of the latest message")
    created_at: datetime = Field(..., description="Timestamp when the thread was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp of the last metadata change")


class ThreadCreateResponse(CamelModel):
    """Schema for a newly created thread."""

    id: str


class ThreadUpdate(CamelModel):
    """Schema for a partial metadata update."""

    title: Optional[str] = Field(None, max_length=255)
    label: Optional[str] = Field(None, max_length=255)
    last_message: Optional[str] = None


class ReconcileResponse(CamelModel):
    """Schema for a label reconciliation run."""

    updated: int = Field(..., ge=0, description="Number of relabeled threads")


class TitleRequest(CamelModel):
    """Schema for the title generation request."""

    user_message: str = Field(..., min_length=1)
    ai_response: str = ""


class TitleResponse(CamelModel):
    """Schema for the title generation response."""

    title: str
