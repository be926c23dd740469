"""Keeps show aggregates consistent with their episode records."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.config import settings
from ..core.exceptions import RecomputationFailure
from ..models.episode import DEFAULT_RUNTIME_MINUTES, Episode, WatchState
from ..models.media import MediaItem, WatchStatus
from .episode_store import EpisodeStore
from .show_store import ShowStore

logger = logging.getLogger(__name__)


@dataclass
class ShowStats:
    """Derived totals for one show's episodes."""

    total: int
    watched: int
    skipped: int
    watch_minutes: int

    @property
    def completed(self) -> int:
        """Episodes the user is done with (watched or skipped)."""
        return self.watched + self.skipped

    @property
    def status(self) -> WatchStatus:
        """Overall show status for these totals."""
        return classify_status(self.completed, self.total)


def classify_status(completed: int, total: int) -> WatchStatus:
    """Classify a show from its completed and total episode counts."""
    if completed == 0:
        return WatchStatus.PLANNED
    if completed == total:
        return WatchStatus.COMPLETED
    return WatchStatus.IN_PROGRESS


def compute_show_stats(episodes: Iterable[Episode]) -> ShowStats:
    """Compute a show's totals.

    Skipped episodes count as completed but add no watch time.
    """
    total = watched = skipped = minutes = 0
    for episode in episodes:
        total += 1
        if episode.watch_state == WatchState.WATCHED:
            watched += 1
            minutes += episode.runtime or DEFAULT_RUNTIME_MINUTES
        elif episode.watch_state == WatchState.SKIPPED:
            skipped += 1
    return ShowStats(total=total, watched=watched, skipped=skipped, watch_minutes=minutes)


class ConsistencyEngine:
    """Recomputes a show's derived fields from its current episodes.

    Recomputations of the same (owner, show) are serialized by a lock. A
    caller that cannot get the lock within ``lock_timeout`` seconds
    recomputes anyway, so an episode write never waits indefinitely. A show's
    lock is dropped once no recomputation of it is running or waiting.
    """

    def __init__(
        self,
        episode_store: EpisodeStore,
        show_store: ShowStore,
        lock_timeout: Optional[float] = None,
    ):
        """
        Initialize consistency engine.

        Args:
            episode_store: Source of episode records
            show_store: Store holding the show aggregates
            lock_timeout: Seconds to wait for a show's lock
        """
        self.episode_store = episode_store
        self.show_store = show_store
        self.lock_timeout = (
            settings.recompute_lock_timeout if lock_timeout is None else lock_timeout
        )
        self._locks: dict[tuple[str, int], asyncio.Lock] = {}
        self._lock_users: dict[tuple[str, int], int] = {}

    def _get_lock(self, owner_id: str, catalog_id: int) -> asyncio.Lock:
        key = (owner_id, catalog_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _acquire(self, lock: asyncio.Lock) -> bool:
        """Try to acquire a lock within the timeout.

        Returns:
            True if the lock is now held by the caller
        """
        acquire = asyncio.ensure_future(lock.acquire())
        try:
            done, _ = await asyncio.wait({acquire}, timeout=self.lock_timeout)
        except BaseException:
            acquire.cancel()
            raise
        if done:
            return acquire.result()

        acquire.cancel()
        # The lock may have been granted while the cancellation was pending
        await asyncio.wait({acquire})
        return not acquire.cancelled() and acquire.result()

    async def recompute_show(self, owner_id: str, catalog_id: int) -> Optional[MediaItem]:
        """Recompute and persist a show's derived fields.

        Does nothing when the show has no episodes, or when the owner has no
        show aggregate for it (orphaned episodes are left to the reconciler).

        Returns:
            Updated show, or None if nothing was updated
        """
        key = (owner_id, catalog_id)
        lock = self._get_lock(owner_id, catalog_id)
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            locked = await self._acquire(lock)
            if not locked:
                logger.warning(
                    f"Recompute lock for user {owner_id}, show {catalog_id} contended, "
                    f"recomputing without it"
                )
            try:
                return await self._recompute(owner_id, catalog_id)
            finally:
                if locked:
                    lock.release()
        finally:
            # Drop the lock once no recompute of this show uses it
            self._lock_users[key] -= 1
            if self._lock_users[key] == 0:
                del self._lock_users[key]
                if not lock.locked():
                    self._locks.pop(key, None)

    async def _recompute(self, owner_id: str, catalog_id: int) -> Optional[MediaItem]:
        episodes = await self.episode_store.list_episodes_for_show(owner_id, catalog_id)
        if not episodes:
            return None

        stats = compute_show_stats(episodes)

        show = await self.show_store.save_derived(
            owner_id,
            catalog_id,
            episodes_watched=stats.completed,
            watch_minutes=stats.watch_minutes,
            watch_status=stats.status,
        )
        if show is None:
            logger.debug(f"No show aggregate for user {owner_id}, show {catalog_id}")
            return None

        logger.info(
            f"Updated stats for show {catalog_id} (user {owner_id}): "
            f"{stats.completed}/{stats.total} episodes, "
            f"{stats.watch_minutes} min, {stats.status.value}"
        )
        return show

    async def recompute_show_safely(self, owner_id: str, catalog_id: int) -> Optional[MediaItem]:
        """Recompute a show, logging instead of raising on failure."""
        try:
            return await self.recompute_show(owner_id, catalog_id)
        except Exception as e:
            failure = RecomputationFailure(owner_id, catalog_id, str(e))
            logger.error(str(failure))
            return None
