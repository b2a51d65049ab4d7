"""
FastAPI application factory.
create_app() is the single entry point for building the app.

All collaborators (Mongo client, providers, services) are created once in the
lifespan and hung off app.state; route handlers reach them through
dependencies.py.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.voice.twilio_voice import TwilioVoiceProvider
from repositories.user_repository import UserRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from services.auth_service import AuthService
from services.token_service import TokenService
from services.verification_dispatcher import VerificationDispatcher
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
        sentry_dsn=settings.sentry.sentry_dsn,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        app.state.db = mongo_client[settings.db.db_name]
        app.state.settings = settings

        users = UserRepository(app.state.db)
        await users.ensure_indexes()

        email_http = httpx.AsyncClient(timeout=settings.email.zepto_timeout_seconds)
        email_provider = ZeptoMailProvider(
            settings.email,
            email_http,
            app_name=settings.app_name,
            code_ttl_minutes=settings.verification.verification_code_ttl_seconds // 60,
        )
        voice_provider = TwilioVoiceProvider(settings.twilio)

        token_service = TokenService(settings.jwt)
        app.state.token_service = token_service
        app.state.auth_service = AuthService(
            users=users,
            dispatcher=VerificationDispatcher(email_provider, voice_provider),
            email_provider=email_provider,
            tokens=token_service,
            settings=settings.verification,
            frontend_url=settings.frontend_url,
        )
        log.info("app_started", app_name=settings.app_name, env=settings.env)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await email_http.aclose()
        await voice_provider.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=None if settings.is_production else settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Credentials allowed so the session cookie travels cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
