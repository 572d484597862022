"""initial_search_schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    videos (search candidates) and search_history (per-user recent queries)
    """
    op.create_table(
        "videos",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("video_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column(
            "script_text",
            sa.Text(),
            nullable=True,
            comment="Transcript used for scoring and excerpts",
        ),
        sa.Column("video_url", sa.String(length=500), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True, comment="Length in seconds"),
        sa.Column("thumbnail_url", sa.String(length=500), nullable=True),
        sa.Column("custom_thumbnail_url", sa.String(length=500), nullable=True),
        sa.Column(
            "embedding",
            postgresql.JSONB(none_as_null=True),
            nullable=True,
            comment="Raw embedding: float array, JSON string, or NULL",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_videos")),
        sa.UniqueConstraint("video_id", name=op.f("uq_videos_video_id")),
    )

    op.create_table(
        "search_history",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("query", sa.String(length=1000), nullable=False),
        sa.Column("normalized_query", sa.String(length=1000), nullable=False),
        sa.Column("results_count", sa.Integer(), nullable=False),
        sa.Column("searched_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_search_history")),
    )
    op.create_index(
        "ix_search_history_user_query",
        "search_history",
        ["user_id", "normalized_query"],
        unique=False,
    )
    op.create_index(
        "ix_search_history_user_searched_at",
        "search_history",
        ["user_id", "searched_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_search_history_user_searched_at", table_name="search_history")
    op.drop_index("ix_search_history_user_query", table_name="search_history")
    op.drop_table("search_history")
    op.drop_table("videos")
