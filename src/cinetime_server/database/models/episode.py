"""Episode watch record ORM model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base


class EpisodeORM(Base):
    """ORM model for episodes table (one row per owner, show, season, episode)."""

    __tablename__ = "episodes"
    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "catalog_id",
            "season_number",
            "episode_number",
            name="uq_episodes_identity",
        ),
        Index("ix_episodes_owner_catalog", "owner_id", "catalog_id"),
        Index("ix_episodes_owner_watch_state", "owner_id", "watch_state"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    catalog_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # Basic info
    episode_title: Mapped[Optional[str]] = mapped_column(String(255))
    air_date: Mapped[Optional[str]] = mapped_column(String(20))
    overview: Mapped[Optional[str]] = mapped_column(Text)
    still_path: Mapped[Optional[str]] = mapped_column(String(255))
    runtime: Mapped[int] = mapped_column(Integer, default=45)  # minutes

    # Watch state
    watch_state: Mapped[str] = mapped_column(String(20), default="unwatched")
    watched_at: Mapped[Optional[datetime]] = mapped_column()
    rating: Mapped[Optional[int]] = mapped_column(Integer)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        default=func.now(), onupdate=func.now()
    )
