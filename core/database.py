"""
Database session management with SQLAlchemy async
"""

from typing import Optional
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from core.config import Settings
import logging

logger = logging.getLogger(__name__)


def create_engine_from_settings(settings: Settings, echo: Optional[bool] = None) -> AsyncEngine:
    """Create the async engine for the configured database"""
    if echo is None:
        echo = settings.ENVIRONMENT == "development"

    logger.debug(f"Creating database engine (echo={echo})")
    return create_async_engine(
        settings.DATABASE_URL,
        echo=echo,
        poolclass=NullPool,  # For async, connection pooling handled differently
        future=True
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create session factory bound to an engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False
    )
