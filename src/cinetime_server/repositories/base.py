"""Base repository with common database operations."""

from typing import Generic, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from ..database.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations."""

    def __init__(self, model: Type[T], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy ORM model class
            session: Database session
        """
        self.model = model
        self.session = session

    async def create(self, instance: T) -> T:
        """
        Create a new record.

        Args:
            instance: Model instance to create

        Returns:
            Created instance
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def update(self, instance: T) -> T:
        """
        Flush pending changes of an existing record.

        Args:
            instance: Model instance to update

        Returns:
            Updated instance
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, instance: T) -> None:
        """
        Delete a record.

        Args:
            instance: Model instance to delete
        """
        await self.session.delete(instance)
        await self.session.flush()
