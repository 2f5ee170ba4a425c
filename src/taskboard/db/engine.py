"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is built from Settings inside create_app() and kept on
app.state, so every app instance (and every test) owns its own pool.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine. Pool sizing only applies to server databases."""
    kwargs = {}
    if not settings.database_url.startswith("sqlite"):
        # Connection pool: min 5, max 20 connections.
        kwargs = {"pool_size": 5, "max_overflow": 15, "pool_pre_ping": True}
    return create_async_engine(settings.database_url, echo=settings.debug, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
