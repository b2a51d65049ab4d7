"""
Authentication endpoints, mounted under /api/v1/user.

POST /register                 create an unverified user, send the code
POST /otp-verification         verify the code, sign in
POST /login                    email + password, verified accounts only
GET  /logout                   clear the session cookie
GET  /me                       current user
POST /password/forgot          email a reset link
PUT  /password/reset/{token}   set a new password, sign in

Bodies are optional so that a missing body reaches the service guards
like an empty one.

Handlers stay thin: they unpack the DTO, call AuthService and shape the
response. Errors raised by the service are rendered by errors.py.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response

from config import AppSettings
from dependencies import (
    get_auth_service,
    get_current_user,
    get_optional_user_id,
    get_settings,
)
from schemas.dto.requests.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyOtpRequest,
)
from schemas.dto.responses.auth import (
    AuthResponse,
    CurrentUserResponse,
    UserProfileResponse,
)
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.models.user import UserDoc
from services.auth_service import AuthService, SessionResult

router = APIRouter(
    prefix="/api/v1/user",
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _set_session_cookie(response: Response, token: str, settings: AppSettings) -> None:
    response.set_cookie(
        settings.jwt.cookie_name,
        value=token,
        httponly=True,
        secure=settings.jwt.cookie_secure,
        samesite="lax",
        path="/",
        max_age=settings.jwt.session_token_ttl_seconds,
    )


def _clear_session_cookie(response: Response, settings: AppSettings) -> None:
    response.set_cookie(
        settings.jwt.cookie_name,
        value="",
        expires=0,
        max_age=0,
        httponly=True,
        secure=settings.jwt.cookie_secure,
        samesite="lax",
        path="/",
    )


def _session_response(
    result: SessionResult, response: Response, settings: AppSettings
) -> AuthResponse:
    _set_session_cookie(response, result.token, settings)
    return AuthResponse(
        message=result.message,
        token=result.token,
        user=UserProfileResponse.from_user(result.user),
    )


@router.post("/register", response_model=MessageResponse)
async def register(
    body: Optional[RegisterRequest] = None,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    body = body or RegisterRequest()
    message = await service.register(
        name=body.name,
        email=body.email,
        phone=body.phone,
        password=body.password,
        verification_method=body.verification_method,
    )
    return MessageResponse(message=message)


@router.post("/otp-verification", response_model=AuthResponse)
async def verify_otp(
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: AppSettings = Depends(get_settings),
    body: Optional[VerifyOtpRequest] = None,
) -> AuthResponse:
    body = body or VerifyOtpRequest()
    result = await service.verify_otp(email=body.email, phone=body.phone, otp=body.otp)
    return _session_response(result, response, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: AppSettings = Depends(get_settings),
    body: Optional[LoginRequest] = None,
) -> AuthResponse:
    body = body or LoginRequest()
    result = await service.login(email=body.email, password=body.password)
    return _session_response(result, response, settings)


@router.get("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: AuthService = Depends(get_auth_service),
    settings: AppSettings = Depends(get_settings),
) -> MessageResponse:
    _clear_session_cookie(response, settings)
    return MessageResponse(message=service.logout(user_id))


@router.get("/me", response_model=CurrentUserResponse)
async def me(user: UserDoc = Depends(get_current_user)) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserProfileResponse.from_user(user))


@router.post("/password/forgot", response_model=MessageResponse)
async def forgot_password(
    body: Optional[ForgotPasswordRequest] = None,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    body = body or ForgotPasswordRequest()
    message = await service.forgot_password(body.email)
    return MessageResponse(message=message)


@router.put("/password/reset/{token}", response_model=AuthResponse)
async def reset_password(
    token: str,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: AppSettings = Depends(get_settings),
    body: Optional[ResetPasswordRequest] = None,
) -> AuthResponse:
    body = body or ResetPasswordRequest()
    result = await service.reset_password(
        token, password=body.password, confirm_password=body.confirm_password
    )
    return _session_response(result, response, settings)
