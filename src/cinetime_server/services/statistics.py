"""Viewing statistics built from the watchlist and episode stores."""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..models.episode import DEFAULT_RUNTIME_MINUTES, Episode, WatchState
from ..models.media import MediaItem, MediaKind, WatchStatus
from ..models.stats import (
    EpisodeStats,
    MonthlyActivity,
    StatsPeriod,
    StatusBreakdown,
    TopMovie,
    TopShow,
    Totals,
    WatchStats,
)
from .episode_store import EpisodeStore
from .show_store import ShowStore

logger = logging.getLogger(__name__)

TOP_LIST_SIZE = 5


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move back a number of calendar months, clamping to the month's last day."""
    index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: StatsPeriod, now: datetime) -> Optional[datetime]:
    """Get the start of a statistics period, or None for all time."""
    if period == StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period == StatsPeriod.MONTH:
        return _shift_months(now, 1)
    if period == StatsPeriod.YEAR:
        return _shift_months(now, 12)
    return None


def format_watch_time(minutes: int) -> str:
    """Format minutes as "1d 2h 3m", "2h 3m" or "3m"."""
    hours, mins = divmod(minutes, 60)
    days, remaining_hours = divmod(hours, 24)
    if days > 0:
        return f"{days}d {remaining_hours}h {mins}m"
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _month_key(moment: Optional[datetime]) -> Optional[str]:
    return moment.strftime("%Y-%m") if moment else None


def calculate_watch_stats(
    media: list[MediaItem],
    episodes: list[Episode],
    period: StatsPeriod = StatsPeriod.ALL,
    now: Optional[datetime] = None,
) -> WatchStats:
    """Summarize an owner's titles and episodes.

    Show watch time is summed from the show's watched episodes; total watch
    time only counts completed titles.
    """
    stats = WatchStats(
        period=period,
        generated_at=now or datetime.utcnow(),
        by_status={status.value: StatusBreakdown() for status in WatchStatus},
    )
    totals = Totals(episodes=len(episodes))

    episodes_by_show: dict[int, list[Episode]] = {}
    for episode in episodes:
        episodes_by_show.setdefault(episode.catalog_id, []).append(episode)

    for item in media:
        breakdown = stats.by_status[item.watch_status.value]
        completed = item.watch_status == WatchStatus.COMPLETED

        if item.kind == MediaKind.MOVIE:
            totals.movies += 1
            breakdown.movies += 1
            breakdown.minutes += item.watch_minutes
            if completed:
                totals.watch_minutes += item.watch_minutes
                if item.rating:
                    stats.top_movies.append(
                        TopMovie(
                            title=item.title,
                            rating=item.rating,
                            watch_minutes=item.watch_minutes,
                            date=item.updated_at,
                        )
                    )
            continue

        totals.shows += 1
        breakdown.shows += 1
        show_episodes = episodes_by_show.get(item.catalog_id, [])
        watched = [ep for ep in show_episodes if ep.watch_state == WatchState.WATCHED]
        show_minutes = sum(ep.runtime or DEFAULT_RUNTIME_MINUTES for ep in watched)
        breakdown.minutes += show_minutes
        if completed:
            totals.watch_minutes += show_minutes
            stats.top_shows.append(
                TopShow(
                    title=item.title,
                    episodes_watched=len(watched),
                    total_episodes=len(show_episodes),
                    watch_minutes=show_minutes,
                    date=item.updated_at,
                )
            )

    watched_episodes = [ep for ep in episodes if ep.watch_state == WatchState.WATCHED]
    skipped_episodes = [ep for ep in episodes if ep.watch_state == WatchState.SKIPPED]
    stats.episode_stats = EpisodeStats(
        total=len(episodes),
        watched=len(watched_episodes),
        skipped=len(skipped_episodes),
        average_rating=(
            sum(ep.rating or 0 for ep in watched_episodes) / len(watched_episodes)
            if watched_episodes
            else 0.0
        ),
        watch_minutes=sum(ep.runtime or DEFAULT_RUNTIME_MINUTES for ep in watched_episodes),
    )

    monthly: dict[str, MonthlyActivity] = {}
    for item in media:
        key = _month_key(item.created_at)
        if key is None:
            continue
        activity = monthly.setdefault(key, MonthlyActivity())
        if item.kind == MediaKind.MOVIE and item.watch_status == WatchStatus.COMPLETED:
            activity.movies += 1
            activity.minutes += item.watch_minutes
    for episode in episodes:
        key = _month_key(episode.created_at)
        if key is None:
            continue
        activity = monthly.setdefault(key, MonthlyActivity())
        if episode.watch_state == WatchState.WATCHED:
            activity.episodes += 1
            activity.minutes += episode.runtime or DEFAULT_RUNTIME_MINUTES
    stats.monthly_activity = dict(sorted(monthly.items()))

    stats.top_movies.sort(key=lambda m: (m.rating, m.watch_minutes), reverse=True)
    stats.top_shows.sort(key=lambda s: (s.episodes_watched, s.watch_minutes), reverse=True)
    stats.top_movies = stats.top_movies[:TOP_LIST_SIZE]
    stats.top_shows = stats.top_shows[:TOP_LIST_SIZE]

    stats.totals = totals
    stats.total_watch_time = format_watch_time(totals.watch_minutes)
    return stats


class StatisticsService:
    """Read-only statistics over an owner's watchlist and episodes."""

    def __init__(self, show_store: ShowStore, episode_store: EpisodeStore):
        """
        Initialize statistics service.

        Args:
            show_store: Watchlist store
            episode_store: Episode store
        """
        self.show_store = show_store
        self.episode_store = episode_store

    async def get_stats(
        self, owner_id: str, period: StatsPeriod = StatsPeriod.ALL
    ) -> WatchStats:
        """Get an owner's viewing statistics for a period."""
        now = datetime.utcnow()
        since = period_start(period, now)

        media = await self.show_store.list_for_owner(owner_id, since=since)
        episodes = await self.episode_store.list_episodes_for_owner(owner_id, since=since)

        logger.debug(
            f"Computing {period.value} stats for user {owner_id}: "
            f"{len(media)} titles, {len(episodes)} episodes"
        )
        return calculate_watch_stats(media, episodes, period, now)
