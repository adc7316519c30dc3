"""
Pydantic schemas for user profiles.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from smartrent.models.user import UserRole
import uuid


class OwnerContact(BaseModel):
    """Contact details shown alongside a listing."""

    name: str = Field(..., description="Owner's display name", examples=["Priya Sharma"])
    email: str = Field(..., description="Owner's email address", examples=["owner@example.com"])
    phone: Optional[str] = Field(None, description="Owner's phone number", examples=["+91 98765 43210"])


class UserResponse(BaseModel):
    """User profile response (no credentials)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(
        ...,
        description="User's unique identifier, shared with the identity provider",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )
    email: str = Field(
        ...,
        description="User's email address",
        examples=["student@example.com"]
    )
    name: str = Field(
        ...,
        description="User's display name",
        examples=["Arjun Mehta"]
    )
    phone: Optional[str] = Field(
        None,
        description="User's phone number"
    )
    role: UserRole = Field(
        ...,
        description="User's role",
        examples=["user"]
    )
    created_at: datetime = Field(
        ...,
        description="Account creation timestamp"
    )
    updated_at: datetime = Field(
        ...,
        description="Last update timestamp"
    )
