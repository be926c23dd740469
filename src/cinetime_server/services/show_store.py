"""Database-backed watchlist (show aggregate) store."""

import logging
from datetime import datetime
from typing import Optional

from ..core.exceptions import NotFoundError, ValidationError
from ..database.models.media import MediaORM
from ..models.media import MediaCreate, MediaItem, MediaKind, MediaUpdate, WatchStatus
from ..repositories.media_repository import MediaRepository
from .base import StoreService

logger = logging.getLogger(__name__)


def validate_rating(rating: Optional[int]) -> None:
    """Reject ratings outside 1-5."""
    if rating is not None and not 1 <= rating <= 5:
        raise ValidationError(f"Rating must be between 1 and 5, got {rating}")


class ShowStore(StoreService):
    """Stores one watchlist record per (owner, catalog title)."""

    async def add(self, owner_id: str, request: MediaCreate) -> MediaItem:
        """Add a title to an owner's watchlist.

        Adding a title that is already present returns the existing record.
        """
        validate_rating(request.rating)
        if not request.title:
            raise ValidationError("Title is required")
        if request.watch_minutes < 0:
            raise ValidationError("Watch minutes cannot be negative")

        async with self._session() as session:
            repo = MediaRepository(session)
            existing = await repo.get_by_owner_catalog(owner_id, request.catalog_id)
            if existing:
                if existing.kind != request.kind.value:
                    raise ValidationError(
                        f"Catalog ID {request.catalog_id} is already on the watchlist "
                        f"as a {existing.kind}"
                    )
                return repo.to_pydantic(existing)

            is_movie = request.kind == MediaKind.MOVIE
            media_orm = MediaORM(
                owner_id=owner_id,
                catalog_id=request.catalog_id,
                kind=request.kind.value,
                title=request.title,
                poster_path=request.poster_path,
                release_date=request.release_date,
                watch_status=(
                    request.watch_status if is_movie else WatchStatus.PLANNED
                ).value,
                episodes_watched=0,
                watch_minutes=request.watch_minutes if is_movie else 0,
                rating=request.rating,
            )
            media_orm = await repo.create(media_orm)
            await session.commit()
            logger.info(
                f"Added {request.kind.value} {request.catalog_id} "
                f"'{request.title}' for user {owner_id}"
            )
            return repo.to_pydantic(media_orm)

    async def get(
        self, owner_id: str, catalog_id: int, kind: Optional[MediaKind] = None
    ) -> Optional[MediaItem]:
        """Get a watchlist title."""
        async with self._session() as session:
            repo = MediaRepository(session)
            media_orm = await repo.get_by_owner_catalog(owner_id, catalog_id, kind)
            return repo.to_pydantic(media_orm) if media_orm else None

    async def exists(self, owner_id: str, catalog_id: int, kind: MediaKind) -> bool:
        """Check whether a title of the given kind is on an owner's watchlist."""
        async with self._session() as session:
            return await MediaRepository(session).exists(owner_id, catalog_id, kind)

    async def list_for_owner(
        self,
        owner_id: str,
        kind: Optional[MediaKind] = None,
        status: Optional[WatchStatus] = None,
        since: Optional[datetime] = None,
    ) -> list[MediaItem]:
        """List an owner's watchlist."""
        async with self._session() as session:
            return await MediaRepository(session).get_for_owner(
                owner_id, kind=kind, status=status, since=since
            )

    async def update_user_fields(
        self, owner_id: str, catalog_id: int, update: MediaUpdate
    ) -> MediaItem:
        """Update the user-set fields of a title.

        Status and watch minutes of shows are derived from their episodes and
        cannot be set directly.
        """
        validate_rating(update.rating)
        if update.watch_minutes is not None and update.watch_minutes < 0:
            raise ValidationError("Watch minutes cannot be negative")

        async with self._session() as session:
            repo = MediaRepository(session)
            media_orm = await repo.get_by_owner_catalog(owner_id, catalog_id)
            if not media_orm:
                raise NotFoundError(f"Catalog ID {catalog_id} is not on the watchlist")

            if media_orm.kind == MediaKind.SHOW.value and (
                update.watch_status is not None or update.watch_minutes is not None
            ):
                raise ValidationError(
                    "Show status and watch time are derived from episodes"
                )

            if update.watch_status is not None:
                media_orm.watch_status = update.watch_status.value
            if update.watch_minutes is not None:
                media_orm.watch_minutes = update.watch_minutes
            if update.rating is not None:
                media_orm.rating = update.rating

            media_orm = await repo.update(media_orm)
            await session.commit()
            logger.info(f"Updated {media_orm.kind} {catalog_id} for user {owner_id}")
            return repo.to_pydantic(media_orm)

    async def save_derived(
        self,
        owner_id: str,
        catalog_id: int,
        episodes_watched: int,
        watch_minutes: int,
        watch_status: WatchStatus,
    ) -> Optional[MediaItem]:
        """Overwrite the derived fields of a show.

        Returns:
            Updated show, or None if the owner has no such show
        """
        async with self._session() as session:
            repo = MediaRepository(session)
            media_orm = await repo.get_by_owner_catalog(
                owner_id, catalog_id, MediaKind.SHOW
            )
            if not media_orm:
                return None

            media_orm.episodes_watched = episodes_watched
            media_orm.watch_minutes = watch_minutes
            media_orm.watch_status = watch_status.value

            media_orm = await repo.update(media_orm)
            await session.commit()
            return repo.to_pydantic(media_orm)

    async def remove(self, owner_id: str, catalog_id: int) -> Optional[MediaItem]:
        """Remove a title from an owner's watchlist.

        Returns:
            The removed title, or None if it was not present
        """
        async with self._session() as session:
            repo = MediaRepository(session)
            media_orm = await repo.get_by_owner_catalog(owner_id, catalog_id)
            if not media_orm:
                return None

            removed = repo.to_pydantic(media_orm)
            await repo.delete(media_orm)
            await session.commit()
            logger.info(f"Removed {removed.kind.value} {catalog_id} for user {owner_id}")
            return removed
