"""
User Pydantic schemas.

Defines request and response schemas for user and role endpoints.
"""

from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from bookcourier.app.models.enums import UserRole
from bookcourier.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """
    Schema for first sign-in registration.

    Used by POST /users. The role is never taken from the client.
    """
    name: Optional[str] = Field(None, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    photo_url: Optional[str] = Field(None, alias="photoURL", max_length=1000, description="Avatar URL")

    @field_validator("email")
    @classmethod
    def normalise_email(cls, value: str) -> str:
        return value.lower()


class UserResponse(CamelModel):
    """Schema for user information response."""
    id: int
    user_id: str
    name: Optional[str] = None
    email: str
    photo_url: Optional[str] = Field(None, alias="photoURL")
    role: UserRole
    created_at: datetime
    updated_at: datetime


class RoleResponse(CamelModel):
    """Schema for GET /users/{email}/role."""
    role: UserRole


class RoleUpdate(CamelModel):
    """Schema for PATCH /users/{id}/role."""
    role: UserRole = Field(..., description="New role")
