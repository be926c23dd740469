"""Maintenance API endpoints."""

import logging

from fastapi import APIRouter

from cinetime_server.api.deps import ApiKeyDep, ConsistencyEngineDep, ReconcilerDep
from cinetime_server.models.episode import EpisodeGroup, ReconcileResult
from cinetime_server.models.media import MediaItem

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/maintenance", tags=["maintenance"])


@router.get("/orphans", response_model=list[EpisodeGroup])
async def find_orphans(
    reconciler: ReconcilerDep,
    _: ApiKeyDep,
    owner_id: str | None = None,
) -> list[EpisodeGroup]:
    """List episode groups whose show is not on the owner's watchlist."""
    return await reconciler.find_orphaned_groups(owner_id)


@router.post("/reconcile", response_model=ReconcileResult)
async def reconcile(
    reconciler: ReconcilerDep,
    _: ApiKeyDep,
    owner_id: str | None = None,
) -> ReconcileResult:
    """Delete orphaned episodes, for everyone or for one user."""
    if owner_id:
        return await reconciler.reconcile_owner(owner_id)
    return await reconciler.reconcile_all()


@router.post("/recompute/{owner_id}/{catalog_id}", response_model=MediaItem | None)
async def recompute_show(
    owner_id: str,
    catalog_id: int,
    engine: ConsistencyEngineDep,
    _: ApiKeyDep,
) -> MediaItem | None:
    """Recompute a show's derived fields from its episodes."""
    logger.info(f"Manual recompute requested for user {owner_id}, show {catalog_id}")
    return await engine.recompute_show(owner_id, catalog_id)
