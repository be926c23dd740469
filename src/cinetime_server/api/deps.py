"""API dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException

from cinetime_server.core.config import settings
from cinetime_server.services.consistency import ConsistencyEngine
from cinetime_server.services.episode_store import EpisodeStore
from cinetime_server.services.reconciler import OrphanReconciler
from cinetime_server.services.show_store import ShowStore
from cinetime_server.services.statistics import StatisticsService
from cinetime_server.services.tmdb_client import TMDBClient

# Global service instances
_episode_store: EpisodeStore | None = None
_show_store: ShowStore | None = None
_consistency_engine: ConsistencyEngine | None = None
_reconciler: OrphanReconciler | None = None
_statistics: StatisticsService | None = None
_tmdb_client: TMDBClient | None = None


def init_services(
    episode_store: EpisodeStore,
    show_store: ShowStore,
    consistency_engine: ConsistencyEngine,
    reconciler: OrphanReconciler,
    statistics: StatisticsService,
    tmdb_client: Optional[TMDBClient] = None,
) -> None:
    """Initialize service instances."""
    global _episode_store, _show_store, _consistency_engine, _reconciler, _statistics, _tmdb_client
    _episode_store = episode_store
    _show_store = show_store
    _consistency_engine = consistency_engine
    _reconciler = reconciler
    _statistics = statistics
    _tmdb_client = tmdb_client


def get_episode_store() -> EpisodeStore:
    """Get the episode store instance."""
    if _episode_store is None:
        raise RuntimeError("Services not initialized")
    return _episode_store


def get_show_store() -> ShowStore:
    """Get the watchlist store instance."""
    if _show_store is None:
        raise RuntimeError("Services not initialized")
    return _show_store


def get_consistency_engine() -> ConsistencyEngine:
    """Get the consistency engine instance."""
    if _consistency_engine is None:
        raise RuntimeError("Services not initialized")
    return _consistency_engine


def get_reconciler() -> OrphanReconciler:
    """Get the orphan reconciler instance."""
    if _reconciler is None:
        raise RuntimeError("Services not initialized")
    return _reconciler


def get_statistics() -> StatisticsService:
    """Get the statistics service instance."""
    if _statistics is None:
        raise RuntimeError("Services not initialized")
    return _statistics


def get_tmdb_client() -> TMDBClient | None:
    """Get the TMDB client instance (None if not configured)."""
    return _tmdb_client


async def get_owner_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Get the authenticated user's ID supplied by the auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


async def verify_api_key(
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Verify API key if configured."""
    if not settings.api_key:
        return  # No API key required

    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    # Expect "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    if parts[1] != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


# Type aliases for dependency injection
EpisodeStoreDep = Annotated[EpisodeStore, Depends(get_episode_store)]
ShowStoreDep = Annotated[ShowStore, Depends(get_show_store)]
ConsistencyEngineDep = Annotated[ConsistencyEngine, Depends(get_consistency_engine)]
ReconcilerDep = Annotated[OrphanReconciler, Depends(get_reconciler)]
StatisticsDep = Annotated[StatisticsService, Depends(get_statistics)]
TMDBClientDep = Annotated[TMDBClient | None, Depends(get_tmdb_client)]
OwnerIdDep = Annotated[str, Depends(get_owner_id)]
ApiKeyDep = Annotated[None, Depends(verify_api_key)]
