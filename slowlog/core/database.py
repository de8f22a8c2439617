"""
Async SQLAlchemy engine factory and FastAPI dependency.

The engine (and its asyncpg pool) is created once in the application
lifespan and handed to the repository; nothing here creates it at import time.
"""

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from slowlog.core.config import Settings
from slowlog.core.stats_repository import StatsRepository


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        connect_args={"command_timeout": settings.DB_COMMAND_TIMEOUT_SECONDS},
    )


def get_stats_repository(request: Request) -> StatsRepository:
    """FastAPI dependency that returns the repository owned by the app."""
    return request.app.state.stats_repository
