"""Episode repository for database operations."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.models.episode import EpisodeORM
from ..models.episode import Episode, EpisodeGroup, WatchState
from .base import BaseRepository


class EpisodeRepository(BaseRepository[EpisodeORM]):
    """Repository for episode database operations."""

    def __init__(self, session: AsyncSession):
        """Initialize episode repository."""
        super().__init__(EpisodeORM, session)

    def to_pydantic(self, episode_orm: EpisodeORM) -> Episode:
        """
        Convert ORM model to Pydantic model.

        Args:
            episode_orm: ORM episode instance

        Returns:
            Pydantic Episode model
        """
        return Episode(
            id=episode_orm.id,
            owner_id=episode_orm.owner_id,
            catalog_id=episode_orm.catalog_id,
            season_number=episode_orm.season_number,
            episode_number=episode_orm.episode_number,
            episode_title=episode_orm.episode_title,
            air_date=episode_orm.air_date,
            overview=episode_orm.overview,
            still_path=episode_orm.still_path,
            runtime=episode_orm.runtime,
            watch_state=WatchState(episode_orm.watch_state),
            watched_at=episode_orm.watched_at,
            rating=episode_orm.rating,
            created_at=episode_orm.created_at,
            updated_at=episode_orm.updated_at,
        )

    async def get_by_identity(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> Optional[EpisodeORM]:
        """
        Get an episode by its unique identity.

        Args:
            owner_id: Owning user ID
            catalog_id: Show catalog ID
            season_number: Season number
            episode_number: Episode number

        Returns:
            Episode ORM or None
        """
        result = await self.session.execute(
            select(EpisodeORM)
            .where(EpisodeORM.owner_id == owner_id)
            .where(EpisodeORM.catalog_id == catalog_id)
            .where(EpisodeORM.season_number == season_number)
            .where(EpisodeORM.episode_number == episode_number)
        )
        return result.scalar_one_or_none()

    async def get_for_show(self, owner_id: str, catalog_id: int) -> list[Episode]:
        """
        Get all episodes of a show for one owner.

        Args:
            owner_id: Owning user ID
            catalog_id: Show catalog ID

        Returns:
            Episodes ordered by season and episode number
        """
        result = await self.session.execute(
            select(EpisodeORM)
            .where(EpisodeORM.owner_id == owner_id)
            .where(EpisodeORM.catalog_id == catalog_id)
            .order_by(EpisodeORM.season_number, EpisodeORM.episode_number)
        )
        return [self.to_pydantic(ep) for ep in result.scalars().all()]

    async def get_for_owner(
        self, owner_id: str, since: Optional[datetime] = None
    ) -> list[Episode]:
        """
        Get all episodes of an owner, optionally created after a point in time.

        Args:
            owner_id: Owning user ID
            since: Optional lower bound on created_at

        Returns:
            List of episodes
        """
        query = select(EpisodeORM).where(EpisodeORM.owner_id == owner_id)
        if since:
            query = query.where(EpisodeORM.created_at >= since)

        result = await self.session.execute(query)
        return [self.to_pydantic(ep) for ep in result.scalars().all()]

    async def get_by_watch_state(
        self, owner_id: str, watch_state: WatchState
    ) -> list[Episode]:
        """
        Get an owner's episodes in a given watch state.

        Args:
            owner_id: Owning user ID
            watch_state: State to filter by

        Returns:
            List of episodes
        """
        result = await self.session.execute(
            select(EpisodeORM)
            .where(EpisodeORM.owner_id == owner_id)
            .where(EpisodeORM.watch_state == watch_state.value)
        )
        return [self.to_pydantic(ep) for ep in result.scalars().all()]

    async def delete_for_show(self, owner_id: str, catalog_id: int) -> int:
        """
        Delete all episodes of a show for one owner.

        Args:
            owner_id: Owning user ID
            catalog_id: Show catalog ID

        Returns:
            Number of deleted episodes
        """
        result = await self.session.execute(
            delete(EpisodeORM)
            .where(EpisodeORM.owner_id == owner_id)
            .where(EpisodeORM.catalog_id == catalog_id)
        )
        return result.rowcount or 0

    async def count_by_show(self, owner_id: Optional[str] = None) -> list[EpisodeGroup]:
        """
        Count episodes per (owner, show) pair.

        Args:
            owner_id: Optional owner to restrict the grouping to

        Returns:
            One group per distinct (owner, show) pair
        """
        query = select(
            EpisodeORM.owner_id,
            EpisodeORM.catalog_id,
            func.count(EpisodeORM.id),
        ).group_by(EpisodeORM.owner_id, EpisodeORM.catalog_id)

        if owner_id:
            query = query.where(EpisodeORM.owner_id == owner_id)

        result = await self.session.execute(query)
        return [
            EpisodeGroup(owner_id=owner, catalog_id=catalog_id, count=count)
            for owner, catalog_id, count in result.all()
        ]
