"""Outbound voice-call channel that reads a verification code aloud."""

from typing import Protocol


class VoiceProvider(Protocol):
    async def send_verification_call(self, phone: str, verification_code: int) -> bool: ...
