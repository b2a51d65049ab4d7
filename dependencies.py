"""
FastAPI dependency providers.

All injectable dependencies are plain functions used with FastAPI's Depends()
system. Long-lived collaborators are built once in the app lifespan and read
back from app.state here.
"""

from __future__ import annotations

from typing import Optional

import jwt
from fastapi import Depends, Request

from config import AppSettings
from errors import AuthenticationError
from schemas.models.user import UserDoc
from services.auth_service import AuthService
from services.token_service import TokenService
from shared.logging import get_logger

log = get_logger(__name__)


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _extract_session_token(request: Request, cookie_name: str) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(cookie_name) or None


def get_optional_user_id(
    request: Request,
    settings: AppSettings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[str]:
    """User id from a valid session token, or None. Never raises."""
    token = _extract_session_token(request, settings.jwt.cookie_name)
    if not token:
        return None
    try:
        return tokens.decode(token).get("sub")
    except jwt.InvalidTokenError:
        return None


async def get_current_user(
    request: Request,
    settings: AppSettings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
    service: AuthService = Depends(get_auth_service),
) -> UserDoc:
    """Authenticated user for the request; 401 when the token is missing or invalid."""
    token = _extract_session_token(request, settings.jwt.cookie_name)
    if not token:
        raise AuthenticationError("User is not authenticated.")
    try:
        claims = tokens.decode(token)
    except jwt.InvalidTokenError as e:
        log.warning("session_token_rejected", reason=type(e).__name__)
        raise AuthenticationError("User is not authenticated.") from None
    return await service.get_current_user(claims.get("sub"))
