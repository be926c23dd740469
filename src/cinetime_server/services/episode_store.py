"""Database-backed episode watch record store."""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError

from ..core.config import settings
from ..core.exceptions import StoreUnavailable, ValidationError
from ..database.models.episode import EpisodeORM
from ..models.episode import Episode, EpisodeFields, EpisodeGroup, WatchState
from ..repositories.episode_repository import EpisodeRepository
from .base import StoreService
from .show_store import validate_rating

logger = logging.getLogger(__name__)

# Called with (owner_id, catalog_id) after a write changes a show's episodes
RecomputeHook = Callable[[str, int], Awaitable[object]]


def validate_identity(season_number: int, episode_number: int) -> None:
    """Reject episode identities outside season >= 0, episode >= 1."""
    if episode_number < 1:
        raise ValidationError("Episode number must be at least 1")
    if season_number < 0:
        raise ValidationError("Season number must be at least 0 (for specials)")


def validate_fields(fields: EpisodeFields) -> None:
    """Reject out-of-range ratings and negative runtimes."""
    validate_rating(fields.rating)
    if fields.runtime is not None and fields.runtime < 0:
        raise ValidationError("Runtime cannot be negative")


def normalize_watched_at(episode_orm: EpisodeORM) -> None:
    """Keep watched_at set exactly when the episode is watched."""
    if episode_orm.watch_state == WatchState.WATCHED.value:
        if episode_orm.watched_at is None:
            episode_orm.watched_at = datetime.utcnow()
    else:
        episode_orm.watched_at = None


class EpisodeStore(StoreService):
    """Stores one watch record per (owner, show, season, episode).

    Every write that changes a show's episodes calls the recompute hook after
    it has committed. Hook failures are logged and never reach the caller.
    """

    def __init__(self, session_factory=None, default_runtime: Optional[int] = None):
        """
        Initialize episode store.

        Args:
            session_factory: Session factory, defaults to the application's
            default_runtime: Runtime in minutes for episodes without one
        """
        super().__init__(session_factory)
        self.default_runtime = default_runtime or settings.default_episode_runtime
        self._recompute_hook: Optional[RecomputeHook] = None

    def set_recompute_hook(self, hook: Optional[RecomputeHook]) -> None:
        """Set the callable run after each episode change."""
        self._recompute_hook = hook

    async def _after_change(self, owner_id: str, catalog_id: int) -> None:
        """Run the recompute hook, swallowing and logging any failure."""
        if not self._recompute_hook:
            return
        try:
            await self._recompute_hook(owner_id, catalog_id)
        except Exception as e:
            logger.error(
                f"Post-write recompute failed for user {owner_id}, show {catalog_id}: {e}"
            )

    def _apply_fields(self, episode_orm: EpisodeORM, fields: EpisodeFields) -> None:
        """Copy explicitly set fields onto an ORM record."""
        for name, value in fields.model_dump(exclude_unset=True).items():
            if name == "watch_state":
                if value is None:
                    continue
                value = WatchState(value).value
            elif name == "runtime" and value is None:
                value = self.default_runtime
            setattr(episode_orm, name, value)

    async def upsert_episode(
        self,
        owner_id: str,
        catalog_id: int,
        season_number: int,
        episode_number: int,
        fields: Optional[EpisodeFields] = None,
    ) -> Episode:
        """Create or update an episode record by identity.

        Raises:
            ValidationError: Bad identity or rating; nothing is written
        """
        fields = fields or EpisodeFields()
        validate_identity(season_number, episode_number)
        validate_fields(fields)

        identity = (owner_id, catalog_id, season_number, episode_number)
        episode = await self._write(*identity, fields)
        if episode is None:
            # Another writer inserted the same identity first; update theirs
            logger.debug(
                f"Concurrent insert of S{season_number:02d}E{episode_number:02d} "
                f"for show {catalog_id}, retrying as update"
            )
            episode = await self._write(*identity, fields)
            if episode is None:
                raise StoreUnavailable(
                    f"Could not write S{season_number:02d}E{episode_number:02d} "
                    f"for show {catalog_id}"
                )

        await self._after_change(owner_id, catalog_id)
        return episode

    async def _write(
        self,
        owner_id: str,
        catalog_id: int,
        season_number: int,
        episode_number: int,
        fields: EpisodeFields,
    ) -> Optional[Episode]:
        """Insert or update one record.

        Returns:
            Stored episode, or None if an insert lost a race on the identity
        """
        async with self._session() as session:
            repo = EpisodeRepository(session)
            episode_orm = await repo.get_by_identity(
                owner_id, catalog_id, season_number, episode_number
            )
            created = episode_orm is None
            if created:
                episode_orm = EpisodeORM(
                    owner_id=owner_id,
                    catalog_id=catalog_id,
                    season_number=season_number,
                    episode_number=episode_number,
                    runtime=self.default_runtime,
                    watch_state=WatchState.UNWATCHED.value,
                )

            self._apply_fields(episode_orm, fields)
            normalize_watched_at(episode_orm)

            if created:
                try:
                    episode_orm = await repo.create(episode_orm)
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return None
            else:
                episode_orm = await repo.update(episode_orm)
                await session.commit()

            logger.info(
                f"Episode {'created' if created else 'updated'}: user {owner_id}, "
                f"show {catalog_id}, S{season_number:02d}E{episode_number:02d} "
                f"({episode_orm.watch_state})"
            )
            return repo.to_pydantic(episode_orm)

    async def add_missing_episodes(
        self,
        owner_id: str,
        catalog_id: int,
        entries: list[tuple[int, int, EpisodeFields]],
    ) -> list[Episode]:
        """Create records for episodes the owner does not have yet.

        Existing records are left untouched. The show is recomputed once
        after all inserts.

        Args:
            owner_id: Owning user ID
            catalog_id: Show catalog ID
            entries: (season_number, episode_number, fields) per episode

        Returns:
            Newly created episodes
        """
        for season_number, episode_number, fields in entries:
            validate_identity(season_number, episode_number)
            validate_fields(fields)

        created = []
        async with self._session() as session:
            repo = EpisodeRepository(session)
            existing = {
                (ep.season_number, ep.episode_number)
                for ep in await repo.get_for_show(owner_id, catalog_id)
            }
            for season_number, episode_number, fields in entries:
                if (season_number, episode_number) in existing:
                    continue
                episode_orm = EpisodeORM(
                    owner_id=owner_id,
                    catalog_id=catalog_id,
                    season_number=season_number,
                    episode_number=episode_number,
                    runtime=self.default_runtime,
                    watch_state=WatchState.UNWATCHED.value,
                )
                self._apply_fields(episode_orm, fields)
                normalize_watched_at(episode_orm)
                created.append(await repo.create(episode_orm))
                existing.add((season_number, episode_number))
            await session.commit()
            episodes = [repo.to_pydantic(ep) for ep in created]

        if episodes:
            logger.info(
                f"Added {len(episodes)} episodes for user {owner_id}, show {catalog_id}"
            )
            await self._after_change(owner_id, catalog_id)
        return episodes

    async def mark_watched(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> Episode:
        """Mark an episode as watched now."""
        return await self.upsert_episode(
            owner_id,
            catalog_id,
            season_number,
            episode_number,
            EpisodeFields(watch_state=WatchState.WATCHED, watched_at=datetime.utcnow()),
        )

    async def mark_unwatched(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> Episode:
        """Mark an episode as unwatched."""
        return await self.upsert_episode(
            owner_id,
            catalog_id,
            season_number,
            episode_number,
            EpisodeFields(watch_state=WatchState.UNWATCHED),
        )

    async def mark_skipped(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> Episode:
        """Mark an episode as skipped."""
        return await self.upsert_episode(
            owner_id,
            catalog_id,
            season_number,
            episode_number,
            EpisodeFields(watch_state=WatchState.SKIPPED),
        )

    async def get_episode(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> Optional[Episode]:
        """Get one episode record."""
        async with self._session() as session:
            repo = EpisodeRepository(session)
            episode_orm = await repo.get_by_identity(
                owner_id, catalog_id, season_number, episode_number
            )
            return repo.to_pydantic(episode_orm) if episode_orm else None

    async def list_episodes_for_show(self, owner_id: str, catalog_id: int) -> list[Episode]:
        """List a show's episodes ordered by season and episode."""
        async with self._session() as session:
            return await EpisodeRepository(session).get_for_show(owner_id, catalog_id)

    async def list_episodes_for_owner(
        self, owner_id: str, since: Optional[datetime] = None
    ) -> list[Episode]:
        """List all of an owner's episodes."""
        async with self._session() as session:
            return await EpisodeRepository(session).get_for_owner(owner_id, since)

    async def list_episodes_by_state(
        self, owner_id: str, watch_state: WatchState
    ) -> list[Episode]:
        """List an owner's episodes in one watch state."""
        async with self._session() as session:
            return await EpisodeRepository(session).get_by_watch_state(owner_id, watch_state)

    async def delete_episode(
        self, owner_id: str, catalog_id: int, season_number: int, episode_number: int
    ) -> bool:
        """Delete one episode record.

        Returns:
            True if deleted, False if not found
        """
        async with self._session() as session:
            repo = EpisodeRepository(session)
            episode_orm = await repo.get_by_identity(
                owner_id, catalog_id, season_number, episode_number
            )
            if not episode_orm:
                return False

            await repo.delete(episode_orm)
            await session.commit()
            logger.info(
                f"Episode deleted: user {owner_id}, show {catalog_id}, "
                f"S{season_number:02d}E{episode_number:02d}"
            )

        await self._after_change(owner_id, catalog_id)
        return True

    async def delete_episodes_for_show(self, owner_id: str, catalog_id: int) -> int:
        """Delete all of a show's episodes for one owner.

        Returns:
            Number of deleted episodes (0 when already gone)
        """
        async with self._session() as session:
            count = await EpisodeRepository(session).delete_for_show(owner_id, catalog_id)
            await session.commit()

        if count > 0:
            logger.info(f"Deleted {count} episodes for user {owner_id}, show {catalog_id}")
        return count

    async def find_episode_group_counts(
        self, owner_id: Optional[str] = None
    ) -> list[EpisodeGroup]:
        """Count episodes per distinct (owner, show) pair."""
        async with self._session() as session:
            return await EpisodeRepository(session).count_by_show(owner_id)
