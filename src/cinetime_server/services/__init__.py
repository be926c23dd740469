"""Tracking services."""

from .consistency import ConsistencyEngine, ShowStats, classify_status, compute_show_stats
from .episode_store import EpisodeStore
from .maintenance import MaintenanceScheduler
from .reconciler import OrphanReconciler
from .show_store import ShowStore
from .statistics import StatisticsService, calculate_watch_stats
from .tmdb_client import TMDBClient

__all__ = [
    "ConsistencyEngine",
    "ShowStats",
    "classify_status",
    "compute_show_stats",
    "EpisodeStore",
    "MaintenanceScheduler",
    "OrphanReconciler",
    "ShowStore",
    "StatisticsService",
    "calculate_watch_stats",
    "TMDBClient",
]
