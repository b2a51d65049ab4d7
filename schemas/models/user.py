"""
User document model.

Maps to the `users` MongoDB collection.

A user starts unverified with a pending numeric verification code. Verifying
the code sets account_verified and clears both code fields. The password
reset flow stores only the SHA-256 of the emailed token next to its expiry and
clears both once the password has been replaced.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from schemas.models.base import MongoBaseModel
from shared.datetime_utils import is_expired

# Fields that are never sent back to a client or loaded by default queries.
PRIVATE_FIELDS = (
    "password_hash",
    "verification_code",
    "verification_code_expire",
    "reset_password_token",
    "reset_password_expire",
)


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    name: str
    email: str
    phone: str
    password_hash: Optional[str] = None
    account_verified: bool = False
    verification_code: Optional[int] = None
    verification_code_expire: Optional[datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expire: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def verification_code_matches(self, code: Optional[int]) -> bool:
        return code is not None and self.verification_code == code

    def verification_code_expired(self, now: Optional[datetime] = None) -> bool:
        return is_expired(self.verification_code_expire, now)
