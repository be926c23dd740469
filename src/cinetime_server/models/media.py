"""Watchlist media models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MediaKind(str, Enum):
    """Kind of catalog title."""

    MOVIE = "movie"
    SHOW = "show"


class WatchStatus(str, Enum):
    """Overall watch status of a title."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MediaCreate(BaseModel):
    """Request to add a title to the watchlist."""

    catalog_id: int
    kind: MediaKind
    title: Optional[str] = None  # Filled from the catalog when omitted
    poster_path: Optional[str] = None
    release_date: Optional[str] = None

    # Movies only; shows derive these from their episodes
    watch_status: WatchStatus = WatchStatus.PLANNED
    watch_minutes: int = 0

    rating: Optional[int] = None  # 1-5


class MediaUpdate(BaseModel):
    """Request to update user-set fields of a watchlist title."""

    watch_status: Optional[WatchStatus] = None  # Movies only
    watch_minutes: Optional[int] = None  # Movies only
    rating: Optional[int] = None  # 1-5


class MediaItem(BaseModel):
    """A title on a user's watchlist (the show aggregate for TV shows)."""

    id: int
    owner_id: str
    catalog_id: int
    kind: MediaKind
    title: str
    poster_path: Optional[str] = None
    release_date: Optional[str] = None

    watch_status: WatchStatus = WatchStatus.PLANNED
    episodes_watched: int = 0
    watch_minutes: int = 0
    rating: Optional[int] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_show(self) -> bool:
        """Check if this title tracks episodes."""
        return self.kind == MediaKind.SHOW
