"""Watchlist media ORM model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ..base import Base


class MediaORM(Base):
    """ORM model for media table (one row per owner and catalog title)."""

    __tablename__ = "media"
    __table_args__ = (
        UniqueConstraint("owner_id", "catalog_id", name="uq_media_owner_catalog"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Identity
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    catalog_id: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[str] = mapped_column(String(10), nullable=False)

    # Display info
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    poster_path: Mapped[Optional[str]] = mapped_column(String(255))
    release_date: Mapped[Optional[str]] = mapped_column(String(20))

    # Watch state (derived from episodes for shows)
    watch_status: Mapped[str] = mapped_column(String(20), default="planned")
    episodes_watched: Mapped[int] = mapped_column(Integer, default=0)
    watch_minutes: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[Optional[int]] = mapped_column(Integer)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        default=func.now(), onupdate=func.now()
    )
