"""Database session management."""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base
from .config import get_database_echo, get_database_url

logger = logging.getLogger(__name__)

# Create async engine
engine = create_async_engine(
    get_database_url(),
    echo=get_database_echo(),
    future=True,
)

# Create session factory
SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Initialize database tables.

    Creates all tables defined in ORM models.
    """
    async with bind.begin() as conn:
        # Import all models to register them with Base
        from .models import EpisodeORM, MediaORM  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized successfully")
