"""
Video (search candidate) model

Rows are written by the content administration tools; this service only reads
them. ``embedding`` is stored as loose JSON: an array, a serialized string, or
occasionally something malformed. Interpreting it is the ranker's job.
"""

from typing import Any

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vidsearch.core.sqlalchemy_types import JSONB, PGArray
from vidsearch.models.base import BaseModel


class Video(BaseModel):
    """Video lecture with transcript text and a precomputed embedding."""

    __tablename__ = "videos"

    video_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    script_text: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Transcript used for scoring and excerpts"
    )
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(PGArray(String), nullable=True)
    duration: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Length in seconds"
    )
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    custom_thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    embedding: Mapped[Any | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Raw embedding: float array, JSON string, or NULL",
    )

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, video_id={self.video_id})>"
