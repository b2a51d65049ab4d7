"""
Account verification and credential management.

AuthService owns the User lifecycle:

    register ──► Unverified ──verify_otp──► Verified
                                             │  ▲
                               forgot_password│  │reset_password
                                             ▼  │
                                        ResetRequested

Each operation runs its guards in a fixed order and raises the first typed
error it hits (see errors.py for the status each maps to). Nothing here is
transactional: the "already verified" and attempt-count checks are plain
reads followed by an insert, so two concurrent registrations can both pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from config import VerificationSettings
from errors import (
    AuthenticationError,
    ConflictError,
    DeliveryError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from infrastructure.email.protocol import EmailProvider
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from services.token_service import TokenService
from services.verification_dispatcher import VerificationDispatcher
from shared.crypto import hash_password, hash_reset_token, verify_password
from shared.datetime_utils import expires_in, utcnow
from shared.generators import generate_reset_token, generate_verification_code
from shared.logging import get_logger, mask_phone
from shared.validators import (
    is_blank,
    normalize_email,
    parse_otp,
    validate_indian_phone,
)

log = get_logger(__name__)

_CODE_FIELDS = ("verification_code", "verification_code_expire")
_RESET_FIELDS = ("reset_password_token", "reset_password_expire")


@dataclass
class SessionResult:
    """Outcome of an operation that signs the user in."""

    user: UserDoc
    token: str
    message: str


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        dispatcher: VerificationDispatcher,
        email_provider: EmailProvider,
        tokens: TokenService,
        settings: VerificationSettings,
        frontend_url: str,
    ) -> None:
        self._users = users
        self._dispatcher = dispatcher
        self._email = email_provider
        self._tokens = tokens
        self._settings = settings
        self._frontend_url = frontend_url.rstrip("/")

    # ── Registration ─────────────────────────────────────────────────────────

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        password: Optional[str],
        verification_method: Optional[str],
    ) -> str:
        """Create an unverified user and send them a verification code.

        Returns the confirmation message of the chosen delivery channel.
        """
        if any(
            is_blank(v) for v in (name, email, phone, password, verification_method)
        ):
            raise ValidationError("All fields are required.")
        if not validate_indian_phone(phone):
            raise ValidationError("Invalid Indian phone number.", field="phone")

        submitted_email = email.strip()
        email = normalize_email(email)

        existing = await self._users.find_verified_by_email_or_phone(email, phone)
        if existing is not None:
            log.warning("registration_failed", reason="already_verified")
            raise ConflictError("Phone or Email already in use.")

        attempts = await self._users.count_unverified_attempts(email, phone)
        if attempts > self._settings.max_unverified_attempts:
            log.warning(
                "registration_failed", reason="max_attempts", attempts=attempts
            )
            raise RateLimitError(
                "Maximum attempts exceeded. Try again after some time."
            )

        verification_code = generate_verification_code()
        user = await self._users.create(
            UserDoc(
                name=name.strip(),
                email=email,
                phone=phone,
                password_hash=hash_password(password),
                verification_code=verification_code,
                verification_code_expire=expires_in(
                    self._settings.verification_code_ttl_seconds
                ),
            )
        )
        log.info(
            "user_registered",
            user_id=str(user.id),
            method=verification_method,
            phone=mask_phone(phone),
        )

        # A failed delivery leaves the unverified record in place; it counts
        # towards the attempt limit like any other.
        return await self._dispatcher.dispatch(
            verification_method,
            verification_code,
            name=user.name,
            email=submitted_email,
            phone=phone,
        )

    # ── OTP verification ─────────────────────────────────────────────────────

    async def verify_otp(
        self,
        email: Optional[str],
        phone: Optional[str],
        otp: Union[int, str, None],
    ) -> SessionResult:
        if not validate_indian_phone(phone):
            raise ValidationError("Invalid Indian phone number.", field="phone")

        user = await self._users.find_latest_unverified(normalize_email(email), phone)
        if user is None:
            raise NotFoundError("User not found.")

        if not user.verification_code_matches(parse_otp(otp)):
            log.warning(
                "otp_verification_failed", user_id=str(user.id), reason="mismatch"
            )
            raise ValidationError("Invalid OTP.", field="otp")

        now = utcnow()
        if user.verification_code_expired(now):
            log.warning(
                "otp_verification_failed", user_id=str(user.id), reason="expired"
            )
            raise ValidationError("OTP expired.", field="otp")

        await self._users.update(
            user.id, {"account_verified": True}, unset_fields=_CODE_FIELDS
        )
        user.account_verified = True
        user.verification_code = None
        user.verification_code_expire = None

        log.info("account_verified", user_id=str(user.id))
        return self._session(user, "Account verified successfully.")

    # ── Login / logout / me ──────────────────────────────────────────────────

    async def login(self, email: Optional[str], password: Optional[str]) -> SessionResult:
        if is_blank(email) or is_blank(password):
            raise ValidationError("Email and password required.")

        user = await self._users.find_verified_by_email(
            normalize_email(email), include_password=True
        )
        # Same error for an unknown email and a wrong password.
        if user is None or not verify_password(password, user.password_hash):
            log.warning(
                "login_failed",
                reason="invalid_credentials",
                user_exists=user is not None,
            )
            raise ValidationError("Invalid credentials.")

        log.info("login_success", user_id=str(user.id))
        return self._session(user, "Login successful.")

    def logout(self, user_id: Optional[str] = None) -> str:
        if user_id:
            log.info("logout", user_id=user_id)
        return "Logged out successfully."

    async def get_current_user(self, user_id: Optional[str]) -> UserDoc:
        """Resolve the user behind an already-verified session token."""
        user = await self._users.find_by_id(user_id) if user_id else None
        if user is None:
            raise AuthenticationError("User is not authenticated.")
        return user

    # ── Password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, email: Optional[str]) -> str:
        if is_blank(email):
            raise ValidationError("Email is required.", field="email")

        user = await self._users.find_verified_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("User not found.")

        reset_token = generate_reset_token()
        await self._users.update(
            user.id,
            {
                "reset_password_token": hash_reset_token(reset_token),
                "reset_password_expire": expires_in(
                    self._settings.reset_token_ttl_seconds
                ),
            },
        )
        log.info("password_reset_requested", user_id=str(user.id))

        reset_url = f"{self._frontend_url}/password/reset/{reset_token}"
        try:
            sent = await self._email.send_password_reset_email(
                user.email, user.name, reset_url
            )
        except Exception as e:
            log.error(
                "password_reset_email_failed",
                user_id=str(user.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DeliveryError("Failed to send password reset email.") from e
        if not sent:
            log.error("password_reset_email_failed", user_id=str(user.id))
            raise DeliveryError("Failed to send password reset email.")

        return "Password reset email sent."

    async def reset_password(
        self,
        token: str,
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> SessionResult:
        user = await self._users.find_by_reset_token(hash_reset_token(token), utcnow())
        if user is None:
            raise ValidationError("Invalid or expired token.")

        if password != confirm_password:
            raise ValidationError("Passwords do not match.", field="confirmPassword")
        if is_blank(password):
            raise ValidationError("Password is required.", field="password")

        await self._users.update(
            user.id,
            {"password_hash": hash_password(password)},
            unset_fields=_RESET_FIELDS,
        )
        user.reset_password_token = None
        user.reset_password_expire = None

        log.info("password_reset_completed", user_id=str(user.id))
        return self._session(user, "Password reset successful.")

    # ── helpers ──────────────────────────────────────────────────────────────

    def _session(self, user: UserDoc, message: str) -> SessionResult:
        return SessionResult(user=user, token=self._tokens.issue(str(user.id)), message=message)
