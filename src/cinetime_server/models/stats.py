"""Viewing statistics models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class StatsPeriod(str, Enum):
    """Time window for statistics."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class Totals(BaseModel):
    """Overall counts."""

    movies: int = 0
    shows: int = 0
    episodes: int = 0
    watch_minutes: int = 0  # Completed titles only


class StatusBreakdown(BaseModel):
    """Counts and minutes for one watch status."""

    movies: int = 0
    shows: int = 0
    minutes: int = 0


class EpisodeStats(BaseModel):
    """Episode level statistics."""

    total: int = 0
    watched: int = 0
    skipped: int = 0
    average_rating: float = 0.0
    watch_minutes: int = 0


class MonthlyActivity(BaseModel):
    """Activity within one calendar month."""

    movies: int = 0
    episodes: int = 0
    minutes: int = 0


class TopMovie(BaseModel):
    """A highly rated completed movie."""

    title: str
    rating: int
    watch_minutes: int
    date: Optional[datetime] = None


class TopShow(BaseModel):
    """A completed show."""

    title: str
    episodes_watched: int
    total_episodes: int
    watch_minutes: int
    date: Optional[datetime] = None


class WatchStats(BaseModel):
    """A user's viewing summary for a period."""

    period: StatsPeriod = StatsPeriod.ALL
    generated_at: datetime = Field(default_factory=datetime.utcnow)
    totals: Totals = Field(default_factory=Totals)
    by_status: dict[str, StatusBreakdown] = Field(default_factory=dict)
    episode_stats: EpisodeStats = Field(default_factory=EpisodeStats)
    monthly_activity: dict[str, MonthlyActivity] = Field(default_factory=dict)
    top_movies: list[TopMovie] = Field(default_factory=list)
    top_shows: list[TopShow] = Field(default_factory=list)
    total_watch_time: str = "0m"
