"""
Search API Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidsearch.api.swagger_responses import combined_responses
from vidsearch.core.config import Settings
from vidsearch.core.db import SessionFactory, get_session
from vidsearch.core.dependencies import (
    get_embedding_client,
    get_llm_client,
    get_optional_user_id,
    get_session_factory,
    get_settings,
)
from vidsearch.embeddings.protocol import EmbeddingClientProtocol
from vidsearch.llm.protocol import LLMClientProtocol
from vidsearch.schemas.search import SearchRequest, SearchResponse
from vidsearch.services.search_history_service import HistoryRecorder
from vidsearch.services.search_service import SearchService

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(
    session: AsyncSession = Depends(get_session),
    embedding_client: EmbeddingClientProtocol = Depends(get_embedding_client),
    llm_client: LLMClientProtocol | None = Depends(get_llm_client),
    session_factory: SessionFactory = Depends(get_session_factory),
    config: Settings = Depends(get_settings),
) -> SearchService:
    """
    Dependency: Get SearchService instance

    Returns:
        SearchService wired with the app-wide provider handles and settings
    """
    return SearchService.from_settings(
        config,
        session=session,
        embedding_client=embedding_client,
        llm_client=llm_client,
        history_recorder=HistoryRecorder(
            session_factory,
            timeout=config.history_write_timeout_seconds,
            max_entries=config.history_max_entries,
        ),
    )


@router.post(
    "",
    response_model=SearchResponse,
    summary="Semantic video search",
    responses=combined_responses(
        data_example={
            "query": "How do I find product-market fit?",
            "results": [
                {
                    "item_id": "0b8f8c39-3f7e-4f0e-9f51-2a4a1c1d9e10",
                    "video_id": "pmf-101",
                    "title": "Finding Product-Market Fit",
                    "video_url": "https://videos.example.com/pmf-101",
                    "duration": 840,
                    "thumbnail_url": None,
                    "custom_thumbnail_url": None,
                    "similarity": 0.83,
                    "rationale": "Walks through the signals that a product has found its market.",
                    "excerpt": "Product-market fit is when customers pull the product out of your hands.",
                }
            ],
        },
        include_errors=[400, 401, 422, 500, 503],
    ),
)
async def search_videos(
    data: SearchRequest,
    user_id: str | None = Depends(get_optional_user_id),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Rank every video against the query and explain the top results.

    Anonymous callers are allowed; authenticated callers also get the query
    recorded in their history.
    """
    return await service.search(data.query, user_id=user_id)
