"""
Search History Repository

Plain INSERT/SELECT/UPDATE/DELETE for search_history. Deduplication and the
per-user cap are decided in the service layer.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.models.search_history import SearchHistory
from vidsearch.repositories.base import BaseRepository


class SearchHistoryRepository(BaseRepository[SearchHistory]):
    """search_history table access, always scoped by user_id."""

    def __init__(self, session: AsyncSession):
        super().__init__(SearchHistory, session)

    async def find_latest_by_query(
        self,
        user_id: str,
        normalized_query: str,
    ) -> SearchHistory | None:
        """
        Most recent row for (user_id, normalized_query).

        Tolerates transient duplicates left by concurrent writers.
        """
        stmt = (
            select(SearchHistory)
            .where(
                SearchHistory.user_id == user_id,
                SearchHistory.normalized_query == normalized_query,
            )
            .order_by(SearchHistory.searched_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch(
        self,
        entry: SearchHistory,
        *,
        query: str,
        results_count: int,
        searched_at: datetime,
    ) -> SearchHistory:
        """Refresh an existing row in place."""

        entry.query = query
        entry.results_count = results_count
        entry.searched_at = searched_at
        await self.session.flush()
        return entry

    async def list_recent(
        self,
        user_id: str,
        *,
        limit: int | None = None,
    ) -> list[SearchHistory]:
        """User's rows, newest first."""

        stmt = (
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.searched_at.desc(), SearchHistory.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_ids(self, user_id: str, ids: Sequence[UUID]) -> int:
        """Delete the given rows owned by user_id. Returns rows removed."""

        if not ids:
            return 0

        stmt = delete(SearchHistory).where(
            SearchHistory.user_id == user_id,
            SearchHistory.id.in_(list(ids)),
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def delete_owned(self, user_id: str, entry_id: UUID) -> bool:
        """Delete one row if (and only if) user_id owns it."""

        return await self.delete_ids(user_id, [entry_id]) == 1

    async def delete_all_for_user(self, user_id: str) -> int:
        """Unconditionally remove every row for user_id."""

        stmt = delete(SearchHistory).where(SearchHistory.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0
