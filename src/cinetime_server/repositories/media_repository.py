"""Media repository for database operations."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models.media import MediaORM
from ..models.media import MediaItem, MediaKind, WatchStatus
from .base import BaseRepository


class MediaRepository(BaseRepository[MediaORM]):
    """Repository for watchlist media database operations."""

    def __init__(self, session: AsyncSession):
        """Initialize media repository."""
        super().__init__(MediaORM, session)

    def to_pydantic(self, media_orm: MediaORM) -> MediaItem:
        """
        Convert ORM model to Pydantic model.

        Args:
            media_orm: ORM media instance

        Returns:
            Pydantic MediaItem model
        """
        return MediaItem(
            id=media_orm.id,
            owner_id=media_orm.owner_id,
            catalog_id=media_orm.catalog_id,
            kind=MediaKind(media_orm.kind),
            title=media_orm.title,
            poster_path=media_orm.poster_path,
            release_date=media_orm.release_date,
            watch_status=WatchStatus(media_orm.watch_status),
            episodes_watched=media_orm.episodes_watched,
            watch_minutes=media_orm.watch_minutes,
            rating=media_orm.rating,
            created_at=media_orm.created_at,
            updated_at=media_orm.updated_at,
        )

    async def get_by_owner_catalog(
        self, owner_id: str, catalog_id: int, kind: Optional[MediaKind] = None
    ) -> Optional[MediaORM]:
        """
        Get a watchlist title by owner and catalog ID.

        Args:
            owner_id: Owning user ID
            catalog_id: Catalog ID
            kind: Optional kind the title must have

        Returns:
            Media ORM or None
        """
        query = (
            select(MediaORM)
            .where(MediaORM.owner_id == owner_id)
            .where(MediaORM.catalog_id == catalog_id)
        )
        if kind:
            query = query.where(MediaORM.kind == kind.value)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists(self, owner_id: str, catalog_id: int, kind: MediaKind) -> bool:
        """
        Check whether a title of the given kind exists for an owner.

        Args:
            owner_id: Owning user ID
            catalog_id: Catalog ID
            kind: Title kind

        Returns:
            True if present
        """
        result = await self.session.execute(
            select(MediaORM.id)
            .where(MediaORM.owner_id == owner_id)
            .where(MediaORM.catalog_id == catalog_id)
            .where(MediaORM.kind == kind.value)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def get_for_owner(
        self,
        owner_id: str,
        kind: Optional[MediaKind] = None,
        status: Optional[WatchStatus] = None,
        since: Optional[datetime] = None,
    ) -> list[MediaItem]:
        """
        Get an owner's watchlist, newest first.

        Args:
            owner_id: Owning user ID
            kind: Optional kind filter
            status: Optional watch status filter
            since: Optional lower bound on created_at

        Returns:
            List of watchlist titles
        """
        query = select(MediaORM).where(MediaORM.owner_id == owner_id)
        if kind:
            query = query.where(MediaORM.kind == kind.value)
        if status:
            query = query.where(MediaORM.watch_status == status.value)
        if since:
            query = query.where(MediaORM.created_at >= since)

        query = query.order_by(MediaORM.created_at.desc(), MediaORM.id.desc())

        result = await self.session.execute(query)
        return [self.to_pydantic(media) for media in result.scalars().all()]
