"""
Request DTOs for authentication endpoints.

RegisterRequest        POST /api/v1/user/register
VerifyOtpRequest       POST /api/v1/user/otp-verification
LoginRequest           POST /api/v1/user/login
ForgotPasswordRequest  POST /api/v1/user/password/forgot
ResetPasswordRequest   PUT  /api/v1/user/password/reset/{token}

Every field is optional at the schema level: presence is checked by the auth
service so that a missing field produces the same 400 body as any other
business-rule violation instead of FastAPI's 422. JSON keys follow the
client's camelCase (``verificationMethod``, ``confirmPassword``); snake_case
is accepted as well.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    verification_method: Optional[str] = Field(
        default=None, alias="verificationMethod"
    )


class VerifyOtpRequest(BaseModel):
    """Request body for POST /otp-verification.

    ``otp`` is the numeric code delivered by email or voice call; clients send
    it either as a number or as a string of digits.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    phone: Optional[str] = None
    otp: Optional[Union[int, str]] = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    """Request body for PUT /password/reset/{token}. The token is in the path."""

    model_config = ConfigDict(populate_by_name=True)

    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")
