"""This file contains the user model for the application."""

from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserProfile(BaseModel):
    """Signed-in user as resolved by the identity provider.

    Attributes:
        id: Stable user id used to scope every store query
        email: User's email, when the provider shares it
        display_name: Name shown in the profile button
        photo_url: Avatar URL
    """

    id: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
