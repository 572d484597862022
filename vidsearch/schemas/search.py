"""
Search Schemas
Pydantic models for the search API
"""

from uuid import UUID

from pydantic import Field

from vidsearch.core.config import settings
from vidsearch.schemas.base import BaseSchema


class SearchRequest(BaseSchema):
    """
    POST /search body
    """

    query: str = Field(
        min_length=1,
        max_length=settings.search_query_max_length,
        description="Free-text question, e.g. 'How do I find product-market fit?'",
    )


class VideoSummary(BaseSchema):
    """Display fields shared by search results and recommendations."""

    item_id: UUID = Field(description="Internal video UUID")
    video_id: str
    title: str
    video_url: str | None = None
    duration: int | None = Field(default=None, description="Length in seconds")
    thumbnail_url: str | None = None
    custom_thumbnail_url: str | None = None
    similarity: float = Field(ge=0.0, le=1.0)


class SearchResult(VideoSummary):
    """One ranked and annotated hit."""

    rationale: str = Field(min_length=1, description="Why this video matches the query")
    excerpt: str = Field(min_length=1, description="Relevant passage from the transcript")


class SearchResponse(BaseSchema):
    """Top-K results, best first."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)
