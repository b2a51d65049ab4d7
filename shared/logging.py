"""
Logger factory and small log helpers.

Usage:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("user_registered", user_id="123", method="email")
"""

from __future__ import annotations

from typing import Optional

import structlog
from structlog.stdlib import BoundLogger

from shared.logging_config import configure_structlog, setup_logging


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """Keep only the country prefix and the last 3 digits of a phone number.

    >>> mask_phone("+919812345678")
    '+91*******678'
    """
    if not phone:
        return phone
    if len(phone) <= 6:
        return "*" * len(phone)
    return phone[:3] + "*" * (len(phone) - 6) + phone[-3:]


def mask_email(email: Optional[str]) -> Optional[str]:
    """Keep the first character of the local part and the whole domain.

    >>> mask_email("asha@example.com")
    'a***@example.com'
    """
    if not email or "@" not in email:
        return email
    local, _, domain = email.rpartition("@")
    return f"{local[:1]}***@{domain}"


__all__ = [
    "get_logger",
    "mask_email",
    "mask_phone",
    "configure_structlog",
    "setup_logging",
]
