"""Initial database schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates the media (watchlist) and episodes tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create media table (one row per owner and catalog title)
    op.create_table(
        "media",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.String(64), nullable=False, index=True),
        sa.Column("catalog_id", sa.Integer, nullable=False),
        sa.Column("kind", sa.String(10), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("poster_path", sa.String(255), nullable=True),
        sa.Column("release_date", sa.String(20), nullable=True),
        sa.Column("watch_status", sa.String(20), default="planned"),
        sa.Column("episodes_watched", sa.Integer, default=0),
        sa.Column("watch_minutes", sa.Integer, default=0),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint("owner_id", "catalog_id", name="uq_media_owner_catalog"),
    )

    # Create episodes table (one row per owner, show, season and episode)
    op.create_table(
        "episodes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("catalog_id", sa.Integer, nullable=False, index=True),
        sa.Column("season_number", sa.Integer, nullable=False),
        sa.Column("episode_number", sa.Integer, nullable=False),
        sa.Column("episode_title", sa.String(255), nullable=True),
        sa.Column("air_date", sa.String(20), nullable=True),
        sa.Column("overview", sa.Text, nullable=True),
        sa.Column("still_path", sa.String(255), nullable=True),
        sa.Column("runtime", sa.Integer, default=45),
        sa.Column("watch_state", sa.String(20), default="unwatched"),
        sa.Column("watched_at", sa.DateTime, nullable=True),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "owner_id",
            "catalog_id",
            "season_number",
            "episode_number",
            name="uq_episodes_identity",
        ),
    )
    op.create_index("ix_episodes_owner_catalog", "episodes", ["owner_id", "catalog_id"])
    op.create_index("ix_episodes_owner_watch_state", "episodes", ["owner_id", "watch_state"])


def downgrade() -> None:
    op.drop_index("ix_episodes_owner_watch_state", table_name="episodes")
    op.drop_index("ix_episodes_owner_catalog", table_name="episodes")
    op.drop_table("episodes")
    op.drop_table("media")
