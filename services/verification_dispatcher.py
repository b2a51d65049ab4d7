"""
Delivers a freshly generated verification code over the channel the user
picked at signup.

    email → HTML email through the EmailProvider
    phone → outbound voice call through the VoiceProvider

There is no retry: a failed delivery raises DeliveryError and the user has to
register again to get a new code.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from errors import DeliveryError, ValidationError
from infrastructure.email.protocol import EmailProvider
from infrastructure.voice.protocol import VoiceProvider
from shared.logging import get_logger, mask_email, mask_phone

log = get_logger(__name__)


class VerificationMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


class VerificationDispatcher:
    def __init__(
        self, email_provider: EmailProvider, voice_provider: VoiceProvider
    ) -> None:
        self._email = email_provider
        self._voice = voice_provider

    async def dispatch(
        self,
        method: Optional[str],
        verification_code: int,
        *,
        name: Optional[str],
        email: str,
        phone: str,
    ) -> str:
        """Send *verification_code* and return the confirmation message.

        Raises:
            ValidationError: *method* is neither ``email`` nor ``phone``.
            DeliveryError: the provider reported a failure or raised.
        """
        try:
            channel = VerificationMethod(method)
        except ValueError:
            raise ValidationError(
                "Invalid verification method.", field="verificationMethod"
            ) from None

        try:
            if channel is VerificationMethod.EMAIL:
                delivered = await self._email.send_verification_email(
                    email, name, verification_code
                )
            else:
                delivered = await self._voice.send_verification_call(
                    phone, verification_code
                )
        except Exception as e:
            log.error(
                "verification_delivery_failed",
                method=channel.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DeliveryError("Failed to send verification code.") from e

        if not delivered:
            log.error("verification_delivery_failed", method=channel.value)
            raise DeliveryError("Failed to send verification code.")

        if channel is VerificationMethod.EMAIL:
            log.info("verification_email_sent", email=mask_email(email))
            return f"Verification email sent to {email}"
        log.info("verification_call_placed", phone=mask_phone(phone))
        return "OTP sent successfully."
