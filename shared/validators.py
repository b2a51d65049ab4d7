"""
Input validators: framework-agnostic, pure functions.
"""

from __future__ import annotations

import re
from typing import Any, Optional

# Indian mobile numbers in E.164 form: +91 followed by 10 digits starting 6-9
INDIAN_PHONE_PATTERN = re.compile(r"^\+91[6-9][0-9]{9}$")

# ASCII digits only
_OTP_PATTERN = re.compile(r"[0-9]+")


def validate_indian_phone(phone: Optional[str]) -> bool:
    """Return True if *phone* is a ``+91`` mobile number (``+91[6-9]XXXXXXXXX``)."""
    if not isinstance(phone, str):
        return False
    return bool(INDIAN_PHONE_PATTERN.fullmatch(phone))


def is_blank(value: Any) -> bool:
    """Return True for ``None`` and for strings that are empty after stripping."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Trim and lower-case an email address; ``None`` passes through."""
    if email is None:
        return None
    return email.strip().lower()


def parse_otp(otp: Any) -> Optional[int]:
    """Coerce a submitted OTP to ``int``.

    Accepts ints and ASCII digit strings (surrounding whitespace allowed). Returns
    ``None`` for anything else, which callers treat as a mismatch.
    """
    if isinstance(otp, bool):
        return None
    if isinstance(otp, int):
        return otp
    if isinstance(otp, str):
        stripped = otp.strip()
        if _OTP_PATTERN.fullmatch(stripped):
            return int(stripped)
    return None
