"""Episode tracking API endpoints."""

import logging

from fastapi import APIRouter, HTTPException

from cinetime_server.api.deps import EpisodeStoreDep, OwnerIdDep, TMDBClientDep
from cinetime_server.models.episode import EpisodeFields, EpisodeView, WatchState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["episodes"])


@router.get("/episodes", response_model=list[EpisodeView])
async def list_episodes_by_state(
    owner_id: OwnerIdDep,
    episode_store: EpisodeStoreDep,
    watch_state: WatchState = WatchState.WATCHED,
) -> list[EpisodeView]:
    """List the user's episodes in one watch state."""
    episodes = await episode_store.list_episodes_by_state(owner_id, watch_state)
    return [EpisodeView.from_episode(ep) for ep in episodes]


@router.get("/shows/{catalog_id}/episodes", response_model=list[EpisodeView])
async def list_show_episodes(
    catalog_id: int,
    owner_id: OwnerIdDep,
    episode_store: EpisodeStoreDep,
) -> list[EpisodeView]:
    """List a show's episodes in season order."""
    episodes = await episode_store.list_episodes_for_show(owner_id, catalog_id)
    return [EpisodeView.from_episode(ep) for ep in episodes]


@router.put(
    "/shows/{catalog_id}/episodes/{season_number}/{episode_number}",
    response_model=EpisodeView,
)
async def upsert_episode(
    catalog_id: int,
    season_number: int,
    episode_number: int,
    fields: EpisodeFields,
    owner_id: OwnerIdDep,
    episode_store: EpisodeStoreDep,
) -> EpisodeView:
    """Create or update an episode's watch record."""
    episode = await episode_store.upsert_episode(
        owner_id, catalog_id, season_number, episode_number, fields
    )
    return EpisodeView.from_episode(episode)


@router.delete("/shows/{catalog_id}/episodes/{season_number}/{episode_number}")
async def delete_episode(
    catalog_id: int,
    season_number: int,
    episode_number: int,
    owner_id: OwnerIdDep,
    episode_store: EpisodeStoreDep,
) -> dict:
    """Delete an episode's watch record."""
    deleted = await episode_store.delete_episode(
        owner_id, catalog_id, season_number, episode_number
    )
    return {"deleted": deleted}


@router.post(
    "/shows/{catalog_id}/seasons/{season_number}/import",
    response_model=list[EpisodeView],
)
async def import_season(
    catalog_id: int,
    season_number: int,
    owner_id: OwnerIdDep,
    episode_store: EpisodeStoreDep,
    tmdb_client: TMDBClientDep,
) -> list[EpisodeView]:
    """Create unwatched records for a season's episodes from TMDB."""
    if not tmdb_client:
        raise HTTPException(status_code=503, detail="TMDB integration not configured")

    catalog_episodes = await tmdb_client.get_season_episodes(catalog_id, season_number)
    entries = [
        (
            ep.season_number,
            ep.episode_number,
            EpisodeFields(
                episode_title=ep.name,
                air_date=ep.air_date,
                overview=ep.overview,
                still_path=ep.still_path,
                runtime=ep.runtime,
            ),
        )
        for ep in catalog_episodes
    ]
    created = await episode_store.add_missing_episodes(owner_id, catalog_id, entries)
    logger.info(
        f"Imported {len(created)} of {len(entries)} episodes for show {catalog_id} "
        f"season {season_number}"
    )
    return [EpisodeView.from_episode(ep) for ep in created]
