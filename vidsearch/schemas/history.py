"""
Search History Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from vidsearch.core.config import settings
from vidsearch.schemas.base import BaseSchema, IDSchema


class SearchHistoryRecordRequest(BaseSchema):
    """POST /history body"""

    query: str = Field(min_length=1, max_length=settings.search_query_max_length)
    results_count: int = Field(default=0, ge=0)


class SearchHistoryResponse(IDSchema):
    """One history row as shown to its owner."""

    query: str
    results_count: int
    searched_at: datetime


class SearchHistoryClearResponse(BaseSchema):
    deleted: int = Field(ge=0)
