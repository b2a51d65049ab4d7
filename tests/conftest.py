"""
Shared fixtures: an in-memory users store with the same async surface as
UserRepository, recording fakes for the email/voice providers, and a fully
wired AuthService built from them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

import pytest
from bson import ObjectId

from config import JWTSettings, VerificationSettings
from schemas.models.user import UserDoc
from services.auth_service import AuthService
from services.token_service import TokenService
from services.verification_dispatcher import VerificationDispatcher
from shared.datetime_utils import ensure_utc, utcnow


class FakeUserRepository:
    """List-backed stand-in for UserRepository.

    Reads hand out copies, like documents coming back from MongoDB, so the
    service can only change stored state through create()/update().
    """

    def __init__(self) -> None:
        self.docs: list[UserDoc] = []

    async def ensure_indexes(self) -> None:
        return None

    def _matches(
        self, user: UserDoc, email: Optional[str], phone: Optional[str], verified: bool
    ) -> bool:
        if user.account_verified is not verified:
            return False
        return bool((email and user.email == email) or (phone and user.phone == phone))

    @staticmethod
    def _out(user: UserDoc, include_password: bool = False) -> UserDoc:
        copy = user.model_copy(deep=True)
        if not include_password:
            copy.password_hash = None
        return copy

    def get(self, user_id: ObjectId) -> UserDoc:
        return next(u for u in self.docs if u.id == user_id)

    async def find_by_id(self, user_id):
        for user in self.docs:
            if str(user.id) == str(user_id):
                return self._out(user)
        return None

    async def find_verified_by_email_or_phone(self, email, phone):
        for user in self.docs:
            if self._matches(user, email, phone, True):
                return self._out(user)
        return None

    async def count_unverified_attempts(self, email, phone) -> int:
        return sum(1 for u in self.docs if self._matches(u, email, phone, False))

    async def find_latest_unverified(self, email, phone):
        candidates = [
            (u.created_at, i, u)
            for i, u in enumerate(self.docs)
            if self._matches(u, email, phone, False)
        ]
        if not candidates:
            return None
        return self._out(max(candidates, key=lambda c: (c[0], c[1]))[2])

    async def find_verified_by_email(self, email, *, include_password=False):
        for user in self.docs:
            if user.account_verified and user.email == email:
                return self._out(user, include_password)
        return None

    async def find_by_reset_token(self, token_hash, now: Optional[datetime] = None):
        now = now or utcnow()
        for user in self.docs:
            if (
                user.reset_password_token == token_hash
                and user.reset_password_expire is not None
                and ensure_utc(user.reset_password_expire) > now
            ):
                return self._out(user)
        return None

    async def create(self, user: UserDoc) -> UserDoc:
        stored = user.model_copy(deep=True)
        stored.id = ObjectId()
        stored.created_at = stored.created_at or utcnow()
        stored.updated_at = utcnow()
        self.docs.append(stored)
        user.id = stored.id
        user.created_at = stored.created_at
        return user

    async def update(
        self,
        user_id: ObjectId,
        set_fields: Optional[dict[str, Any]] = None,
        unset_fields: Iterable[str] = (),
    ) -> bool:
        for user in self.docs:
            if user.id == user_id:
                for field, value in (set_fields or {}).items():
                    setattr(user, field, value)
                for field in unset_fields:
                    setattr(user, field, None)
                user.updated_at = utcnow()
                return True
        return False

    def add(self, **fields) -> UserDoc:
        """Insert a document directly, bypassing the service."""
        base = dict(
            name="Asha",
            email="asha@example.com",
            phone="+919812345678",
            account_verified=False,
            created_at=utcnow(),
        )
        base.update(fields)
        user = UserDoc(**base)
        user.id = ObjectId()
        self.docs.append(user)
        return user


class FakeEmailProvider:
    def __init__(self) -> None:
        self.result: bool = True
        self.error: Optional[Exception] = None
        self.verification_emails: list[tuple] = []
        self.reset_emails: list[tuple] = []

    async def send_verification_email(self, email, user_name, verification_code):
        if self.error:
            raise self.error
        self.verification_emails.append((email, user_name, verification_code))
        return self.result

    async def send_password_reset_email(self, email, user_name, reset_url):
        if self.error:
            raise self.error
        self.reset_emails.append((email, user_name, reset_url))
        return self.result


class FakeVoiceProvider:
    def __init__(self) -> None:
        self.result: bool = True
        self.error: Optional[Exception] = None
        self.calls: list[tuple] = []

    async def send_verification_call(self, phone, verification_code):
        if self.error:
            raise self.error
        self.calls.append((phone, verification_code))
        return self.result


FRONTEND_URL = "https://app.example.com"


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Keep pydantic-settings away from the project's real .env file.

    Tests control config exclusively through constructor arguments and
    monkeypatch.setenv().
    """
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def email_provider() -> FakeEmailProvider:
    return FakeEmailProvider()


@pytest.fixture
def voice_provider() -> FakeVoiceProvider:
    return FakeVoiceProvider()


@pytest.fixture
def jwt_settings() -> JWTSettings:
    return JWTSettings(
        jwt_secret="test-secret-key-with-enough-length-for-hs256",
        jwt_private_key="",
        jwt_public_key="",
        cookie_secure=False,
    )


@pytest.fixture
def token_service(jwt_settings) -> TokenService:
    return TokenService(jwt_settings)


@pytest.fixture
def verification_settings() -> VerificationSettings:
    return VerificationSettings(
        verification_code_ttl_seconds=600,
        reset_token_ttl_seconds=900,
        max_unverified_attempts=3,
    )


@pytest.fixture
def auth_service(
    user_repo, email_provider, voice_provider, token_service, verification_settings
) -> AuthService:
    return AuthService(
        users=user_repo,
        dispatcher=VerificationDispatcher(email_provider, voice_provider),
        email_provider=email_provider,
        tokens=token_service,
        settings=verification_settings,
        frontend_url=FRONTEND_URL + "/",
    )
