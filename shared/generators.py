"""
Random code and token generators: pure, side-effect-free functions.

Both use the ``secrets`` module; nothing here touches the database.
"""

from __future__ import annotations

import secrets

VERIFICATION_CODE_MIN = 10000
VERIFICATION_CODE_MAX = 99999


def generate_verification_code() -> int:
    """Generate a 5-digit numeric OTP.

    The first digit is never zero, so the code survives a round trip through
    ``int()`` and is always read out as five digits on a voice call.
    """
    return VERIFICATION_CODE_MIN + secrets.randbelow(
        VERIFICATION_CODE_MAX - VERIFICATION_CODE_MIN + 1
    )


def generate_reset_token(num_bytes: int = 20) -> str:
    """Generate a hex-encoded password reset token.

    Args:
        num_bytes: Random bytes before hex encoding (default 20, giving a
            40-character token that is safe to embed in a URL path).
    """
    return secrets.token_hex(num_bytes)
