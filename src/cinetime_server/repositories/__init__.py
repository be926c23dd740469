"""Repository layer for database operations."""

from .episode_repository import EpisodeRepository
from .media_repository import MediaRepository

__all__ = [
    "EpisodeRepository",
    "MediaRepository",
]
