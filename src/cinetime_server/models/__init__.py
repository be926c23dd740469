"""Pydantic models for API requests/responses and domain objects."""

from .episode import (
    Episode,
    EpisodeFields,
    EpisodeGroup,
    EpisodeView,
    ReconcileResult,
    WatchState,
    episode_identifier,
    formatted_air_date,
    watch_time_hours,
)
from .media import MediaCreate, MediaItem, MediaKind, MediaUpdate, WatchStatus
from .stats import StatsPeriod, WatchStats

__all__ = [
    "Episode",
    "EpisodeFields",
    "EpisodeGroup",
    "EpisodeView",
    "ReconcileResult",
    "WatchState",
    "episode_identifier",
    "formatted_air_date",
    "watch_time_hours",
    "MediaCreate",
    "MediaItem",
    "MediaKind",
    "MediaUpdate",
    "WatchStatus",
    "StatsPeriod",
    "WatchStats",
]
