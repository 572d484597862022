"""
Search History API Routes
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.api.swagger_responses import combined_responses
from vidsearch.core.config import Settings
from vidsearch.core.db import get_session
from vidsearch.core.dependencies import get_current_user_id, get_optional_user_id, get_settings
from vidsearch.schemas.history import (
    SearchHistoryClearResponse,
    SearchHistoryRecordRequest,
    SearchHistoryResponse,
)
from vidsearch.services.search_history_service import SearchHistoryService

router = APIRouter(prefix="/history", tags=["history"])

_ENTRY_EXAMPLE = {
    "id": "7a1e2b44-6f0d-4a5b-8a3c-0d9c2f1e4b77",
    "query": "How do I find product-market fit?",
    "results_count": 5,
    "searched_at": "2026-10-19T09:30:00Z",
}


def get_history_service(
    session: AsyncSession = Depends(get_session),
    config: Settings = Depends(get_settings),
) -> SearchHistoryService:
    return SearchHistoryService(session=session, max_entries=config.history_max_entries)


@router.get(
    "",
    response_model=list[SearchHistoryResponse],
    summary="List recent searches",
    responses=combined_responses(data_example=[_ENTRY_EXAMPLE], include_errors=[401, 500]),
)
async def list_history(
    user_id: str | None = Depends(get_optional_user_id),
    service: SearchHistoryService = Depends(get_history_service),
) -> list[SearchHistoryResponse]:
    """Newest first. Anonymous callers get an empty list."""

    return await service.list_recent(user_id)


@router.post(
    "",
    response_model=SearchHistoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a search",
    responses=combined_responses(
        status_code=201,
        data_example=_ENTRY_EXAMPLE,
        include_errors=[400, 401, 422, 500],
    ),
)
async def record_history(
    data: SearchHistoryRecordRequest,
    user_id: str = Depends(get_current_user_id),
    service: SearchHistoryService = Depends(get_history_service),
) -> SearchHistoryResponse:
    """Refresh the existing entry for this query or add a new one."""

    return await service.record(user_id, data.query, data.results_count)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete one history entry",
    responses=combined_responses(status_code=204, include_errors=[401, 404, 500]),
)
async def delete_history_entry(
    entry_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: SearchHistoryService = Depends(get_history_service),
) -> None:
    await service.delete_entry(user_id, entry_id)


@router.delete(
    "",
    response_model=SearchHistoryClearResponse,
    summary="Clear all history",
    responses=combined_responses(data_example={"deleted": 12}, include_errors=[401, 500]),
)
async def clear_history(
    user_id: str = Depends(get_current_user_id),
    service: SearchHistoryService = Depends(get_history_service),
) -> SearchHistoryClearResponse:
    deleted = await service.clear(user_id)
    return SearchHistoryClearResponse(deleted=deleted)
