"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Settings are validated once (load_settings) and injected; the
token issuer, OAuth handshake state, Google client and database engine
are built from them and hung on app.state. Lifespan manages startup and
shutdown (Redis, engine disposal).

Run with: uvicorn --factory taskboard.main:create_app
(or `taskboard serve`).
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard import __version__
from taskboard.api import api_router
from taskboard.api.errors import register_error_handlers
from taskboard.auth.google import GoogleOAuthClient
from taskboard.auth.handshake import HandshakeState
from taskboard.auth.jwt import TokenIssuer
from taskboard.config import Settings, load_settings
from taskboard.db.engine import build_engine, build_session_factory
from taskboard.middleware.rate_limit import RateLimitMiddleware
from taskboard.middleware.request_id import RequestIdMiddleware
from taskboard.middleware.security import SecurityHeadersMiddleware
from taskboard.redis_pool import close_redis, init_redis

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "taskboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await init_redis(settings.redis_url)
        logger.info("taskboard.redis_connected")
    except Exception as e:
        # Redis is optional: the app runs without rate limiting
        logger.warning("taskboard.redis_unavailable", error=str(e))

    yield

    logger.info("taskboard.shutdown")
    await close_redis()
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or load_settings()

    app = FastAPI(
        title="Taskboard API",
        description="Personal task boards with status and progress tracking",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.token_issuer = TokenIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(hours=settings.access_token_expire_hours),
    )
    app.state.handshake_state = HandshakeState(
        settings.session_secret,
        ttl=timedelta(seconds=settings.oauth_state_expire_seconds),
    )
    app.state.google_client = GoogleOAuthClient(
        settings.google_client_id,
        settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RequestId → Security → RateLimit → handler
    # CORS wraps everything, 429s and error responses included.
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(api_router)

    return app
