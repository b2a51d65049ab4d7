"""ZeptoMail implementation of EmailProvider.

Messages go out through the ZeptoMail HTTP API on a shared
``httpx.AsyncClient`` whose timeout is set by the caller. HTML bodies are
rendered from the Jinja2 templates in ``templates/emails/``; every message
also carries a plain-text alternative.

Delivery never raises: any transport error or non-2xx answer is logged and
reported as ``False``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates" / "emails"

_AUTH_SCHEME = "Zoho-enczapikey"


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: httpx.AsyncClient,
        app_name: str = "Auth Service",
        code_ttl_minutes: int = 10,
        template_dir: Path = TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._code_ttl_minutes = code_ttl_minutes
        self._jinja = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )

    def _authorization(self) -> str:
        token = self._settings.zepto_api_token
        if token.startswith(f"{_AUTH_SCHEME} "):
            return token
        return f"{_AUTH_SCHEME} {token}"

    def _message(
        self, to_email: str, to_name: Optional[str], subject: str, html: str, text: str
    ) -> dict[str, Any]:
        return {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [{"email_address": {"address": to_email, "name": to_name or to_email}}],
            "subject": subject,
            "htmlbody": html,
            "textbody": text,
        }

    async def _deliver(self, message: dict[str, Any]) -> bool:
        to_email = mask_email(message["to"][0]["email_address"]["address"])
        if not self._settings.zepto_api_token:
            log.error("email_not_sent", to_email=to_email, reason="token_not_configured")
            return False

        try:
            response = await self._http.post(
                ZEPTO_API_URL,
                json=message,
                headers={"Authorization": self._authorization()},
            )
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=message["subject"],
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if not 200 <= response.status_code < 300:
            log.error(
                "email_rejected",
                to_email=to_email,
                subject=message["subject"],
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False

        log.info("email_sent", to_email=to_email, subject=message["subject"])
        return True

    async def send_verification_email(
        self, email: str, user_name: Optional[str], verification_code: int
    ) -> bool:
        html = self._jinja.get_template("verification.html").render(
            verification_code=verification_code,
            user_name=user_name,
            app_name=self._app_name,
            ttl_minutes=self._code_ttl_minutes,
        )
        greeting = f"Hello {user_name}," if user_name else "Hello,"
        text = (
            f"{greeting}\n\n"
            f"Your verification code is: {verification_code}\n\n"
            f"This code expires in {self._code_ttl_minutes} minutes."
        )
        return await self._deliver(
            self._message(email, user_name, "Your Verification Code", html, text)
        )

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], reset_url: str
    ) -> bool:
        html = self._jinja.get_template("password_reset.html").render(
            reset_url=reset_url, user_name=user_name, app_name=self._app_name
        )
        text = f"Reset your password here: {reset_url}"
        return await self._deliver(
            self._message(email, user_name, "Reset Password", html, text)
        )
