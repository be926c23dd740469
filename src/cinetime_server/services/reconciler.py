"""Detects and removes orphaned episode records."""

import logging
from typing import Optional

from ..models.episode import EpisodeGroup, ReconcileResult
from ..models.media import MediaKind
from .episode_store import EpisodeStore
from .show_store import ShowStore

logger = logging.getLogger(__name__)


class OrphanReconciler:
    """Removes episode groups whose show is not on the owner's watchlist.

    Episode writes and show deletes are not transactional with each other,
    so orphans are expected. Every operation here is safe to re-run.
    """

    def __init__(self, episode_store: EpisodeStore, show_store: ShowStore):
        """
        Initialize reconciler.

        Args:
            episode_store: Store holding the episode records
            show_store: Store holding the show aggregates
        """
        self.episode_store = episode_store
        self.show_store = show_store

    async def find_orphaned_groups(self, owner_id: Optional[str] = None) -> list[EpisodeGroup]:
        """Find episode groups with no matching show.

        Args:
            owner_id: Restrict the search to one owner

        Returns:
            Orphaned (owner, show) groups with their episode counts
        """
        groups = await self.episode_store.find_episode_group_counts(owner_id)

        orphaned = []
        for group in groups:
            if not await self.show_store.exists(group.owner_id, group.catalog_id, MediaKind.SHOW):
                orphaned.append(group)

        return orphaned

    async def reconcile_all(self) -> ReconcileResult:
        """Delete every orphaned episode group across all owners."""
        logger.info("Starting cleanup of orphaned episodes...")
        return await self._reconcile(await self.find_orphaned_groups())

    async def reconcile_owner(self, owner_id: str) -> ReconcileResult:
        """Delete the orphaned episode groups of one owner."""
        logger.info(f"Starting cleanup of orphaned episodes for user {owner_id}...")
        return await self._reconcile(await self.find_orphaned_groups(owner_id))

    async def _reconcile(self, orphaned: list[EpisodeGroup]) -> ReconcileResult:
        result = ReconcileResult()

        for group in orphaned:
            try:
                deleted = await self.episode_store.delete_episodes_for_show(
                    group.owner_id, group.catalog_id
                )
            except Exception as e:
                logger.error(
                    f"Failed to clean orphaned episodes for user {group.owner_id}, "
                    f"show {group.catalog_id}: {e}"
                )
                result.failed_groups.append(group)
                continue

            result.total_deleted += deleted
            result.groups_reconciled.append(group)
            logger.info(
                f"Cleaned {deleted} orphaned episodes for user {group.owner_id}, "
                f"show {group.catalog_id}"
            )

        logger.info(f"Cleanup complete. Removed {result.total_deleted} orphaned episodes.")
        return result

    async def reconcile_one_show(self, owner_id: str, catalog_id: int) -> int:
        """Delete all of a show's episodes regardless of orphan status.

        Used when the owner deletes the show itself.

        Returns:
            Number of deleted episodes
        """
        deleted = await self.episode_store.delete_episodes_for_show(owner_id, catalog_id)
        if deleted > 0:
            logger.info(
                f"Cleaned up {deleted} episodes for show {catalog_id}, user {owner_id}"
            )
        return deleted
