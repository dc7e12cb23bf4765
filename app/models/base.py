"""Base models and common imports for all models."""

from datetime import datetime, UTC
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel as PydanticBaseModel, Field


def utc_now() -> datetime:
    """Current time as naive UTC at millisecond precision, as BSON stores it."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000, tzinfo=None)


class BaseModel(PydanticBaseModel):
    """Base model with common fields for MongoDB documents."""

    id: Optional[str] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")

    class Config:
        """Pydantic config."""
        populate_by_name = True

    def to_mongo(self) -> Dict[str, Any]:
        """Convert model to MongoDB document."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        # BSON has no notion of our enums
        return {
            key: value.value if isinstance(value, Enum) else value
            for key, value in data.items()
        }

    @classmethod
    def from_mongo(cls, data: Dict[str, Any]):
        """Create model instance from MongoDB document."""
        if not data:
            return None
        data = dict(data)
        if "_id" in data:
            data["_id"] = str(data["_id"])
        return cls(**data)
