"""
Response bodies that are not tied to a single endpoint.

MessageResponse is what register, logout and forgot-password return;
ErrorResponse documents the body rendered for every AppError.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """``AppError.to_dict()``; ``field`` and ``details`` only when set."""

    success: bool = False
    message: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str
    checks: dict[str, str]
