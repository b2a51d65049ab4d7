"""Twilio implementation of VoiceProvider.

Places an outbound call whose TwiML reads the verification code twice. Digits
are space-separated so the speech engine says "one two three" rather than
"one hundred twenty-three".

Uses the SDK's aiohttp-based client so the call never blocks the event loop;
the timeout comes from TwilioSettings.
"""

from __future__ import annotations

from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.http.async_http_client import AsyncTwilioHttpClient
from twilio.rest import Client
from twilio.twiml.voice_response import VoiceResponse

from config import TwilioSettings
from shared.logging import get_logger, mask_phone

log = get_logger(__name__)


def spell_out_code(verification_code: int) -> str:
    """``12345`` → ``"1 2 3 4 5"``."""
    return " ".join(str(verification_code))


def build_verification_twiml(verification_code: int) -> str:
    spoken = spell_out_code(verification_code)
    response = VoiceResponse()
    response.say(f"Your verification code is {spoken}. Repeat: {spoken}.")
    return str(response)


class TwilioVoiceProvider:
    def __init__(
        self, settings: TwilioSettings, client: Optional[Client] = None
    ) -> None:
        self._settings = settings
        self._http_client: Optional[AsyncTwilioHttpClient] = None
        if client is None and settings.is_configured:
            self._http_client = AsyncTwilioHttpClient(
                timeout=settings.twilio_timeout_seconds
            )
            client = Client(
                settings.twilio_sid,
                settings.twilio_auth_token,
                http_client=self._http_client,
            )
        self._client = client

    async def send_verification_call(self, phone: str, verification_code: int) -> bool:
        if self._client is None:
            log.error("twilio_call_failed", reason="credentials_not_configured")
            return False
        try:
            call = await self._client.calls.create_async(
                to=phone,
                from_=self._settings.twilio_phone_number,
                twiml=build_verification_twiml(verification_code),
            )
        except TwilioException as e:
            log.error(
                "twilio_call_failed",
                phone=mask_phone(phone),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        except Exception as e:
            log.error(
                "twilio_call_error",
                phone=mask_phone(phone),
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        log.info("twilio_call_placed", phone=mask_phone(phone), call_sid=call.sid)
        return True

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.close()
