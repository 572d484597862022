"""
Per-user search history

One row per (user_id, normalized_query); repeat searches refresh
``searched_at`` and ``results_count`` in place. The row cap per user is
enforced by the history service after every write.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vidsearch.models.base import Base, UUIDMixin


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchHistory(Base, UUIDMixin):
    """Recent query issued by a user."""

    __tablename__ = "search_history"
    __table_args__ = (
        Index("ix_search_history_user_query", "user_id", "normalized_query"),
        Index("ix_search_history_user_searched_at", "user_id", "searched_at"),
    )

    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    query: Mapped[str] = mapped_column(String(1000), nullable=False)
    normalized_query: Mapped[str] = mapped_column(String(1000), nullable=False)
    results_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<SearchHistory(id={self.id}, user_id={self.user_id})>"
