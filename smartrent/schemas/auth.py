"""
Pydantic schemas for authentication requests and responses.
Handles signup, login, token refresh and current-user payloads.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Literal
from smartrent.schemas.user import UserResponse


class SignupRequest(BaseModel):
    """Signup request schema. Admins cannot be self-registered."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["student@example.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="User's password (minimum 6 characters)",
        examples=["secret123"]
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's display name",
        examples=["Arjun Mehta"]
    )
    phone: Optional[str] = Field(
        None,
        max_length=32,
        description="Contact phone number",
        examples=["+91 98765 43210"]
    )
    role: Literal["user", "owner"] = Field(
        "user",
        description="Requested role: user (default) or owner",
        examples=["owner"]
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate and clean name."""
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["student@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="User's password"
    )

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(
        ...,
        min_length=1,
        description="Refresh token issued at login",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )


class SessionResponse(BaseModel):
    """Bearer tokens for an authenticated session."""

    access_token: str = Field(
        ...,
        description="Bearer access token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )
    refresh_token: str = Field(
        ...,
        description="Refresh token",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )
    token_type: str = Field(
        default="bearer",
        description="Token type",
        examples=["bearer"]
    )
    expires_in: int = Field(
        ...,
        description="Access token expiration time in seconds",
        examples=[3600]
    )


class SignupResponse(BaseModel):
    message: str = Field(..., examples=["User created successfully"])
    user: UserResponse


class LoginResponse(BaseModel):
    """Complete login response schema."""

    message: str = Field(..., examples=["Login successful"])
    user: UserResponse = Field(..., description="Authenticated user's profile")
    session: SessionResponse = Field(..., description="Issued tokens")


class CurrentUserResponse(BaseModel):
    user: UserResponse
