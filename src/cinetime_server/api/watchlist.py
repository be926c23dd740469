"""Watchlist API endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from cinetime_server.api.deps import (
    ConsistencyEngineDep,
    OwnerIdDep,
    ReconcilerDep,
    ShowStoreDep,
    StatisticsDep,
    TMDBClientDep,
)
from cinetime_server.models.media import MediaCreate, MediaItem, MediaKind, MediaUpdate, WatchStatus
from cinetime_server.models.stats import StatsPeriod, WatchStats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


@router.post("", response_model=MediaItem)
async def add_to_watchlist(
    request: MediaCreate,
    owner_id: OwnerIdDep,
    show_store: ShowStoreDep,
    engine: ConsistencyEngineDep,
    tmdb_client: TMDBClientDep,
) -> MediaItem:
    """Add a movie or show to the watchlist.

    A show added after some of its episodes were tracked is recomputed
    from them before it is returned.
    """
    if not request.title and tmdb_client:
        metadata = await tmdb_client.get_title(request.kind, request.catalog_id)
        request.title = metadata.title
        request.poster_path = request.poster_path or metadata.poster_path
        request.release_date = request.release_date or metadata.release_date
        if (
            request.kind == MediaKind.MOVIE
            and request.watch_status == WatchStatus.COMPLETED
            and not request.watch_minutes
        ):
            request.watch_minutes = metadata.runtime_minutes or 0

    item = await show_store.add(owner_id, request)
    if item.is_show:
        recomputed = await engine.recompute_show_safely(owner_id, item.catalog_id)
        if recomputed:
            return recomputed
    return item


@router.get("", response_model=list[MediaItem])
async def get_watchlist(
    owner_id: OwnerIdDep,
    show_store: ShowStoreDep,
    kind: MediaKind | None = None,
    status: WatchStatus | None = None,
) -> list[MediaItem]:
    """List the watchlist, optionally filtered by kind and status."""
    return await show_store.list_for_owner(owner_id, kind=kind, status=status)


@router.get("/stats", response_model=WatchStats)
async def get_watchlist_stats(
    owner_id: OwnerIdDep,
    statistics: StatisticsDep,
    period: StatsPeriod = StatsPeriod.ALL,
) -> WatchStats:
    """Get viewing statistics for a period."""
    return await statistics.get_stats(owner_id, period)


@router.get("/{catalog_id}", response_model=MediaItem)
async def get_watchlist_item(
    catalog_id: int,
    owner_id: OwnerIdDep,
    show_store: ShowStoreDep,
) -> MediaItem:
    """Get one watchlist title."""
    item = await show_store.get(owner_id, catalog_id)
    if not item:
        raise HTTPException(status_code=404, detail="Title not on watchlist")
    return item


@router.put("/{catalog_id}", response_model=MediaItem)
async def update_watch_status(
    catalog_id: int,
    update: MediaUpdate,
    owner_id: OwnerIdDep,
    show_store: ShowStoreDep,
) -> MediaItem:
    """Update rating, or status and watch time of a movie."""
    return await show_store.update_user_fields(owner_id, catalog_id, update)


@router.delete("/{catalog_id}")
async def remove_from_watchlist(
    catalog_id: int,
    owner_id: OwnerIdDep,
    show_store: ShowStoreDep,
    reconciler: ReconcilerDep,
) -> dict:
    """Remove a title; removing a show also deletes its episodes."""
    removed = await show_store.remove(owner_id, catalog_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Title not on watchlist")

    episodes_deleted = 0
    if removed.is_show:
        episodes_deleted = await reconciler.reconcile_one_show(owner_id, catalog_id)

    return {
        "status": "removed",
        "catalog_id": catalog_id,
        "kind": removed.kind.value,
        "episodes_deleted": episodes_deleted,
    }
