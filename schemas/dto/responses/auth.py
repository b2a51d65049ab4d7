"""
Response DTOs for authentication endpoints.

UserProfileResponse  public identity of a user (never credentials or codes)
AuthResponse         otp-verification / login / password reset (200, sets cookie)
CurrentUserResponse  GET /me (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.user import UserDoc


class UserProfileResponse(BaseModel):
    """Public user shape, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    phone: str
    account_verified: bool = Field(alias="accountVerified")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @classmethod
    def from_user(cls, user: UserDoc) -> "UserProfileResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            phone=user.phone,
            account_verified=user.account_verified,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    """Body returned whenever a session token is issued."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    token: str
    user: UserProfileResponse


class CurrentUserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: UserProfileResponse
