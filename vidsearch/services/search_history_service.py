"""
Search History Service

Update-or-insert of a user's recent queries followed by the per-user cap.
Request handlers use SearchHistoryService inside the request transaction;
the search path goes through HistoryRecorder, which writes on its own
session and never lets a failure reach the caller.
"""

from __future__ import annotations

import asyncio
import unicodedata
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.core.db import SessionFactory
from vidsearch.core.exceptions import RecordNotFoundError, ValidationError
from vidsearch.core.logging import get_logger, metrics_counter
from vidsearch.models.search_history import SearchHistory, utcnow
from vidsearch.repositories.search_history_repository import SearchHistoryRepository
from vidsearch.schemas.history import SearchHistoryResponse

logger = get_logger(__name__)

DEFAULT_MAX_ENTRIES = 20


def normalize_query(text: str) -> str:
    """Comparison key for history dedupe: NFKC, single spaces, casefolded."""

    folded = unicodedata.normalize("NFKC", text or "")
    return " ".join(folded.split()).casefold()


class SearchHistoryService:
    """Per-user history operations. The caller owns the transaction."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        repository: SearchHistoryRepository | None = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self.session = session
        self.repository = repository or SearchHistoryRepository(session)
        self.max_entries = max_entries

    async def record(
        self,
        user_id: str,
        query: str,
        results_count: int,
    ) -> SearchHistoryResponse:
        """
        Refresh the row for this query, or insert one, then enforce the cap.

        Recording the same query twice leaves a single row carrying the
        latest timestamp and result count.
        """
        display_query = " ".join((query or "").split())
        normalized = normalize_query(display_query)
        if not normalized:
            raise ValidationError("query must not be blank")
        if results_count < 0:
            raise ValidationError("results_count must be >= 0")

        now = utcnow()
        entry = await self.repository.find_latest_by_query(user_id, normalized)
        refreshed = entry is not None
        if entry is not None:
            entry = await self.repository.touch(
                entry,
                query=display_query,
                results_count=results_count,
                searched_at=now,
            )
        else:
            entry = await self.repository.create(
                SearchHistory(
                    user_id=user_id,
                    query=display_query,
                    normalized_query=normalized,
                    results_count=results_count,
                    searched_at=now,
                )
            )

        evicted = await self.enforce_cap(user_id)
        logger.info(
            "search_history_recorded",
            user_id=user_id,
            entry_id=str(entry.id),
            refreshed=refreshed,
            evicted=evicted,
        )
        return SearchHistoryResponse.model_validate(entry)

    async def enforce_cap(self, user_id: str) -> int:
        """
        Keep the newest ``max_entries`` distinct queries for ``user_id``.

        Rows beyond the cap, and older rows repeating a newer row's
        normalized query, are deleted. Returns the number of rows removed.
        """
        rows = await self.repository.list_recent(user_id)

        seen: set[str] = set()
        kept = 0
        doomed: list[UUID] = []
        for row in rows:
            if row.normalized_query in seen or kept >= self.max_entries:
                doomed.append(row.id)
                continue
            seen.add(row.normalized_query)
            kept += 1

        return await self.repository.delete_ids(user_id, doomed)

    async def list_recent(self, user_id: str | None) -> list[SearchHistoryResponse]:
        """Newest first, at most ``max_entries``. Anonymous callers get []."""

        if user_id is None:
            return []

        rows = await self.repository.list_recent(user_id, limit=self.max_entries)
        return [SearchHistoryResponse.model_validate(row) for row in rows]

    async def recent_queries(self, user_id: str, limit: int) -> list[str]:
        rows = await self.repository.list_recent(user_id, limit=limit)
        return [row.query for row in rows]

    async def delete_entry(self, user_id: str, entry_id: UUID) -> None:
        """
        Delete one entry owned by ``user_id``.

        Raises:
            RecordNotFoundError: If the entry does not exist or belongs to
                another user (the two cases are indistinguishable)
        """
        deleted = await self.repository.delete_owned(user_id, entry_id)
        if not deleted:
            raise RecordNotFoundError(f"SearchHistory(id={entry_id}) not found")

        logger.info("search_history_entry_deleted", user_id=user_id, entry_id=str(entry_id))

    async def clear(self, user_id: str) -> int:
        deleted = await self.repository.delete_all_for_user(user_id)
        logger.info("search_history_cleared", user_id=user_id, deleted=deleted)
        return deleted


class HistoryRecorder:
    """
    Best-effort history writes for the search path.

    Each write runs on a fresh session with its own commit and is bounded by
    ``timeout``. Failures are logged and counted, never raised.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        timeout: float,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self.session_factory = session_factory
        self.timeout = timeout
        self.max_entries = max_entries

    async def record_safely(self, user_id: str, query: str, results_count: int) -> bool:
        """Returns True when the write committed."""

        try:
            await asyncio.wait_for(
                self._record(user_id, query, results_count),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            metrics_counter("history_write_failed", reason="timeout")
            logger.warning("search_history_write_timeout", user_id=user_id, timeout=self.timeout)
            return False
        except Exception as exc:  # noqa: BLE001 - history never fails a search
            metrics_counter("history_write_failed", reason="error")
            logger.warning(
                "search_history_write_failed",
                user_id=user_id,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return False
        return True

    async def _record(self, user_id: str, query: str, results_count: int) -> None:
        async with self.session_factory() as session:
            try:
                service = SearchHistoryService(session=session, max_entries=self.max_entries)
                await service.record(user_id, query, results_count)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
