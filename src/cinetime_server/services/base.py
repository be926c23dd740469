"""Shared plumbing for database-backed services."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.exceptions import StoreUnavailable
from ..database.session import SessionLocal


class StoreService:
    """Base for services that open one database session per operation."""

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        """
        Initialize service.

        Args:
            session_factory: Session factory, defaults to the application's
        """
        self._session_factory = session_factory or SessionLocal

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating persistence errors to StoreUnavailable."""
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Database operation failed: {e}") from e
