"""Episode watch tracking models.

Derived presentation values (identifier, formatted air date, hours) are
computed by the plain functions at the bottom of this module and are never
stored.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_RUNTIME_MINUTES = 45


class WatchState(str, Enum):
    """Watch state of a single episode."""

    UNWATCHED = "unwatched"
    WATCHED = "watched"
    SKIPPED = "skipped"


class EpisodeFields(BaseModel):
    """Mutable fields of an episode record. Unset fields are left unchanged."""

    episode_title: Optional[str] = None
    air_date: Optional[str] = None  # ISO date, e.g. "2024-01-05"
    overview: Optional[str] = None
    still_path: Optional[str] = None
    runtime: Optional[int] = None  # Duration in minutes

    watch_state: Optional[WatchState] = None
    watched_at: Optional[datetime] = None
    rating: Optional[int] = None  # 1-5


class Episode(BaseModel):
    """A user's watch record for one episode of a show."""

    id: int
    owner_id: str
    catalog_id: int
    season_number: int
    episode_number: int

    episode_title: Optional[str] = None
    air_date: Optional[str] = None
    overview: Optional[str] = None
    still_path: Optional[str] = None
    runtime: int = DEFAULT_RUNTIME_MINUTES

    watch_state: WatchState = WatchState.UNWATCHED
    watched_at: Optional[datetime] = None
    rating: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EpisodeView(Episode):
    """Episode with derived presentation fields, as returned by the API."""

    episode_identifier: str
    formatted_air_date: str
    watch_time_hours: float

    @classmethod
    def from_episode(cls, episode: Episode) -> "EpisodeView":
        """Build a view from a stored episode."""
        return cls(
            **episode.model_dump(),
            episode_identifier=episode_identifier(episode),
            formatted_air_date=formatted_air_date(episode),
            watch_time_hours=watch_time_hours(episode),
        )


class EpisodeGroup(BaseModel):
    """Episode count for one (owner, show) pair."""

    owner_id: str
    catalog_id: int
    count: int


class ReconcileResult(BaseModel):
    """Outcome of an orphan reconciliation pass."""

    total_deleted: int = 0
    groups_reconciled: list[EpisodeGroup] = Field(default_factory=list)
    failed_groups: list[EpisodeGroup] = Field(default_factory=list)


def episode_identifier(episode: Episode) -> str:
    """Get the S01E01 style identifier of an episode."""
    return f"S{episode.season_number:02d}E{episode.episode_number:02d}"


def formatted_air_date(episode: Episode) -> str:
    """Get the air date as "Jan 5, 2024", or "Unknown"."""
    if not episode.air_date:
        return "Unknown"
    try:
        aired = date.fromisoformat(episode.air_date[:10])
    except ValueError:
        return "Unknown"
    return f"{aired.strftime('%b')} {aired.day}, {aired.year}"


def watch_time_hours(episode: Episode) -> float:
    """Get the episode runtime in hours."""
    return (episode.runtime or DEFAULT_RUNTIME_MINUTES) / 60
