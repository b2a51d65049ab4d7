"""
Repository for the `users` collection.

All queries go through PyMongo's native asyncio client. The password hash is
excluded from every read unless a caller asks for it explicitly (login).

Uniqueness of verified email/phone is checked by the auth service before
insert; the indexes below only support those lookups and do not enforce it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from schemas.models.user import UserDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

USERS_COLLECTION = "users"

_WITHOUT_PASSWORD = {"password_hash": 0}


def _identity_filter(
    email: Optional[str], phone: Optional[str], *, verified: bool
) -> dict[str, Any]:
    """``$or`` over whichever of email/phone were supplied, pinned to a verification state."""
    clauses = []
    if email:
        clauses.append({"email": email, "account_verified": verified})
    if phone:
        clauses.append({"phone": phone, "account_verified": verified})
    if not clauses:
        raise ValueError("email or phone is required")
    return {"$or": clauses}


class UserRepository:
    def __init__(self, db: AsyncDatabase) -> None:
        self._col: AsyncCollection = db[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index(
            [("email", ASCENDING), ("account_verified", ASCENDING)]
        )
        await self._col.create_index(
            [("phone", ASCENDING), ("account_verified", ASCENDING)]
        )
        await self._col.create_index([("created_at", DESCENDING)])
        await self._col.create_index(
            [("reset_password_token", ASCENDING)], sparse=True
        )
        log.info("user_indexes_ensured", collection=USERS_COLLECTION)

    async def find_by_id(self, user_id: str | ObjectId) -> Optional[UserDoc]:
        if not isinstance(user_id, ObjectId):
            if not ObjectId.is_valid(user_id):
                return None
            user_id = ObjectId(user_id)
        doc = await self._col.find_one({"_id": user_id}, _WITHOUT_PASSWORD)
        return UserDoc.from_mongo(doc)

    async def find_verified_by_email_or_phone(
        self, email: Optional[str], phone: Optional[str]
    ) -> Optional[UserDoc]:
        doc = await self._col.find_one(
            _identity_filter(email, phone, verified=True), _WITHOUT_PASSWORD
        )
        return UserDoc.from_mongo(doc)

    async def count_unverified_attempts(
        self, email: Optional[str], phone: Optional[str]
    ) -> int:
        return await self._col.count_documents(
            _identity_filter(email, phone, verified=False)
        )

    async def find_latest_unverified(
        self, email: Optional[str], phone: Optional[str]
    ) -> Optional[UserDoc]:
        """Newest unverified record matching email or phone."""
        doc = await self._col.find_one(
            _identity_filter(email, phone, verified=False),
            _WITHOUT_PASSWORD,
            sort=[("created_at", DESCENDING)],
        )
        return UserDoc.from_mongo(doc)

    async def find_verified_by_email(
        self, email: str, *, include_password: bool = False
    ) -> Optional[UserDoc]:
        projection = None if include_password else _WITHOUT_PASSWORD
        doc = await self._col.find_one(
            {"email": email, "account_verified": True}, projection
        )
        return UserDoc.from_mongo(doc)

    async def find_by_reset_token(
        self, token_hash: str, now: Optional[datetime] = None
    ) -> Optional[UserDoc]:
        """User holding *token_hash* whose reset window has not closed yet."""
        doc = await self._col.find_one(
            {
                "reset_password_token": token_hash,
                "reset_password_expire": {"$gt": now or utcnow()},
            },
            _WITHOUT_PASSWORD,
        )
        return UserDoc.from_mongo(doc)

    async def create(self, user: UserDoc) -> UserDoc:
        now = utcnow()
        if user.created_at is None:
            user.created_at = now
        user.updated_at = now
        result = await self._col.insert_one(user.to_mongo())
        user.id = result.inserted_id
        return user

    async def update(
        self,
        user_id: ObjectId,
        set_fields: Optional[dict[str, Any]] = None,
        unset_fields: Iterable[str] = (),
    ) -> bool:
        """Partial update: ``$set`` the given fields and ``$unset`` the rest.

        Only the named fields are written; the rest of the document is left
        as stored.
        """
        update: dict[str, Any] = {"$set": {**(set_fields or {}), "updated_at": utcnow()}}
        unset = {field: "" for field in unset_fields}
        if unset:
            update["$unset"] = unset
        result = await self._col.update_one({"_id": user_id}, update)
        return result.matched_count == 1
