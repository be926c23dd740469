"""Database ORM models."""

from .episode import EpisodeORM
from .media import MediaORM

__all__ = [
    "MediaORM",
    "EpisodeORM",
]
